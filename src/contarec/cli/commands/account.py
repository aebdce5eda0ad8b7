"""Tracked account commands."""

import click
from contarec.cli.account_resolution import (
    resolve_account_or_exit,
    save_state_or_exit,
    source_for,
)
from contarec.cli.error_handling import handle_domain_error
from contarec.domain.account import AccountService
from contarec.domain.entities import AccountFilterConfig, Source, parse_column


def _describe(config: AccountFilterConfig) -> str:
    value = config.filter_value or "*"
    text = f"{config.filter_column.value}={value} sum {config.sum_column.value}"
    if config.subtract_config is not None:
        sub = config.subtract_config
        text += (
            f" minus {sub.filter_column.value}={sub.filter_value or '*'}"
            f" sum {sub.sum_column.value}"
        )
    return text


def _updated_config(
    config: AccountFilterConfig,
    filter_column: str | None,
    filter_value: str | None,
    sum_column: str | None,
) -> AccountFilterConfig:
    """Copy of a rule without its subtract rule, with the given fields replaced."""
    source = config.source
    return AccountFilterConfig(
        filter_column=parse_column(filter_column, source) if filter_column else config.filter_column,
        sum_column=parse_column(sum_column, source) if sum_column else config.sum_column,
        filter_value=config.filter_value if filter_value is None else filter_value,
    )


@click.group()
def account_group():
    """Manage tracked accounts and their filter rules."""
    pass


@account_group.command("list")
@click.option("--anaf", is_flag=True, help="List ANAF accounts instead of conta accounts")
@click.pass_context
def list_accounts(ctx, anaf: bool):
    """List tracked accounts with their filter rules."""
    state = ctx.obj["state"]
    service = AccountService(state)
    source = source_for(anaf)

    accounts = service.list_accounts(source)
    if not accounts:
        click.echo("No accounts found.")
        return

    selected = state.selected_external_accounts if anaf else state.selected_ledger_accounts
    click.echo(f"\n{'ANAF' if anaf else 'Conta'} accounts:")
    click.echo("-" * 70)
    for account in accounts:
        mark = "*" if account in selected else " "
        line = f"{mark} {account:12s} | {_describe(service.get_config(source, account))}"
        files = state.external_account_files.get(account) if anaf else None
        if files:
            line += f" | files: {', '.join(files)}"
        click.echo(line)


@account_group.command("add")
@click.argument("account")
@click.option("--anaf", is_flag=True, help="Add an ANAF account")
@click.pass_context
def add_account(ctx, account: str, anaf: bool):
    """Track a new account.

    Examples:
        contarec account add 4427
        contarec account add 620 --anaf
    """
    service = AccountService(ctx.obj["state"])
    try:
        service.add_account(source_for(anaf), account)
    except ValueError as e:
        handle_domain_error(ctx, e)

    save_state_or_exit(ctx)
    click.echo(f"Added account '{account.strip()}'")


@account_group.command("remove")
@click.argument("account")
@click.option("--anaf", is_flag=True, help="Remove an ANAF account")
@click.pass_context
def remove_account(ctx, account: str, anaf: bool):
    """Stop tracking an account.

    Its filter rule and mappings are removed as well.
    """
    state = ctx.obj["state"]
    source = source_for(anaf)
    account = resolve_account_or_exit(ctx, state, account, source)
    try:
        AccountService(state).remove_account(source, account)
    except ValueError as e:
        handle_domain_error(ctx, e)

    save_state_or_exit(ctx)
    click.echo(f"Removed account '{account}'")


@account_group.command("configure")
@click.argument("account")
@click.option("--anaf", is_flag=True, help="Configure an ANAF account")
@click.option("--filter-column", help="Column rows are filtered on")
@click.option("--filter-value", help="Value the filter column must hold (empty matches all)")
@click.option("--sum-column", help="Column that is summed")
@click.option("--subtract-column", help="Filter column of the subtracted rows")
@click.option("--subtract-value", help="Filter value of the subtracted rows")
@click.option("--subtract-sum-column", help="Column summed over the subtracted rows")
@click.option("--reset", is_flag=True, help="Restore the default rule")
@click.pass_context
def configure_account(
    ctx,
    account: str,
    anaf: bool,
    filter_column: str | None,
    filter_value: str | None,
    sum_column: str | None,
    subtract_column: str | None,
    subtract_value: str | None,
    subtract_sum_column: str | None,
    reset: bool,
):
    """Set the filter rule of an account.

    Options left out keep their current value. Conta columns: data, ndp,
    explicatie, cont, suma_d, suma_c, sold. ANAF columns: CTG_SUME,
    ATRIBUT_PL, IME_COD_IMPOZIT, DENUMIRE_IMPOZIT, SUMA_PLATA, INCASARI,
    SUMA_NEACHITATA, RAMBURSARI.

    Examples:
        contarec account configure 4423 --sum-column suma_d
        contarec account configure 2 --anaf --filter-value D --subtract-value DIM
        contarec account configure 436 --reset
    """
    state = ctx.obj["state"]
    service = AccountService(state)
    source = source_for(anaf)
    account = resolve_account_or_exit(ctx, state, account, source)

    try:
        if reset:
            service.configure_account(source, account, None)
        else:
            current = service.get_config(source, account)
            subtract = current.subtract_config
            if subtract_column or subtract_value is not None or subtract_sum_column:
                # A new subtract rule starts from the main rule's columns
                subtract = _updated_config(
                    subtract or AccountFilterConfig(current.filter_column, current.sum_column),
                    subtract_column,
                    subtract_value,
                    subtract_sum_column,
                )
            config = _updated_config(current, filter_column, filter_value, sum_column)
            service.configure_account(
                source,
                account,
                AccountFilterConfig(
                    filter_column=config.filter_column,
                    sum_column=config.sum_column,
                    filter_value=config.filter_value,
                    subtract_config=subtract,
                ),
            )
    except ValueError as e:
        handle_domain_error(ctx, e)

    save_state_or_exit(ctx)
    click.echo(f"{account}: {_describe(service.get_config(source, account))}")


@account_group.command("select")
@click.argument("accounts", nargs=-1)
@click.option("--anaf", is_flag=True, help="Select ANAF accounts")
@click.pass_context
def select_accounts(ctx, accounts: tuple[str, ...], anaf: bool):
    """Choose the accounts calculations cover; no ACCOUNTS clears the selection."""
    state = ctx.obj["state"]
    source = source_for(anaf)
    resolved = [resolve_account_or_exit(ctx, state, account, source) for account in accounts]
    try:
        selected = AccountService(state).select_accounts(source, resolved)
    except ValueError as e:
        handle_domain_error(ctx, e)

    save_state_or_exit(ctx)
    if selected:
        click.echo(f"Selected: {', '.join(selected)}")
    else:
        click.echo("Selection cleared")


@account_group.command("assign")
@click.argument("account")
@click.argument("files", nargs=-1, type=click.Path())
@click.pass_context
def assign_files(ctx, account: str, files: tuple[str, ...]):
    """Bind an ANAF account to specific statement files.

    Without FILES the binding is removed and files are chosen by the account
    in their name again.

    Examples:
        contarec account assign 1/4423 fise_1.xlsx
        contarec account assign 1/4423
    """
    state = ctx.obj["state"]
    account = resolve_account_or_exit(ctx, state, account, Source.EXTERNAL)
    try:
        AccountService(state).assign_files(account, list(files))
    except ValueError as e:
        handle_domain_error(ctx, e)

    save_state_or_exit(ctx)
    if files:
        click.echo(f"Assigned {len(files)} file(s) to '{account}'")
    else:
        click.echo(f"Removed file assignment of '{account}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
