"""Account mapping commands."""

import click
from contarec.cli.account_resolution import resolve_account_or_exit, save_state_or_exit
from contarec.cli.error_handling import handle_domain_error
from contarec.domain.entities import Source
from contarec.domain.mapping import AccountMappingService


@click.group()
def mapping_group():
    """Manage which ANAF accounts each conta account is compared with."""
    pass


@mapping_group.command("list")
@click.pass_context
def list_mappings(ctx):
    """List account mappings."""
    service = AccountMappingService(ctx.obj["state"])

    mappings = service.list_mappings()
    if not mappings:
        click.echo("No mappings found.")
        return

    click.echo("\nAccount mappings:")
    click.echo("-" * 60)
    for ledger_account, external_accounts in mappings.items():
        click.echo(f"{ledger_account:12s} -> {', '.join(external_accounts)}")

    for problem in service.validate():
        click.echo(f"Warning: {problem}", err=True)


@mapping_group.command("add")
@click.argument("conta_account")
@click.argument("anaf_accounts", nargs=-1, required=True)
@click.pass_context
def add_mapping(ctx, conta_account: str, anaf_accounts: tuple[str, ...]):
    """Compare a conta account with one or more ANAF accounts.

    Examples:
        contarec mapping add 4315 412 451
        contarec mapping add 4423 1/4423
    """
    state = ctx.obj["state"]
    conta_account = resolve_account_or_exit(ctx, state, conta_account, Source.LEDGER)
    anaf = [resolve_account_or_exit(ctx, state, a, Source.EXTERNAL) for a in anaf_accounts]
    try:
        mapped = AccountMappingService(state).add_mapping(conta_account, anaf)
    except ValueError as e:
        handle_domain_error(ctx, e)

    save_state_or_exit(ctx)
    click.echo(f"{conta_account} -> {', '.join(mapped)}")


@mapping_group.command("remove")
@click.argument("conta_account")
@click.argument("anaf_account", required=False)
@click.pass_context
def remove_mapping(ctx, conta_account: str, anaf_account: str | None):
    """Remove one ANAF account from a mapping, or the whole mapping.

    Examples:
        contarec mapping remove 4315 458
        contarec mapping remove 446.CV
    """
    service = AccountMappingService(ctx.obj["state"])
    try:
        service.remove_mapping(conta_account, anaf_account)
    except ValueError as e:
        handle_domain_error(ctx, e)

    save_state_or_exit(ctx)
    if anaf_account:
        click.echo(f"Removed {anaf_account} from the mapping of {conta_account}")
    else:
        click.echo(f"Removed the mapping of {conta_account}")


@mapping_group.command("reset")
@click.pass_context
def reset_mappings(ctx):
    """Restore the default mappings."""
    AccountMappingService(ctx.obj["state"]).reset()
    save_state_or_exit(ctx)
    click.echo("Mappings reset to defaults")


@mapping_group.command("check")
@click.pass_context
def check_mappings(ctx):
    """Check that mappings only use tracked accounts."""
    problems = AccountMappingService(ctx.obj["state"]).validate()
    if not problems:
        click.echo("All mappings are valid")
        return

    for problem in problems:
        click.echo(f"Error: {problem}", err=True)
    ctx.exit(1)


def register_commands(cli):
    """Register mapping commands with main CLI."""
    cli.add_command(mapping_group, name="mapping")
