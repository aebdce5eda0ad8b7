"""Main CLI entry point."""

import logging

import click
from contarec.database.factories import create_sqlite_store
from contarec.domain.errors import DomainError
from contarec.domain.state import ReconciliationState

# Import and register all commands at module level
from contarec.cli.commands import (
    account,
    calculate,
    dates,
    inspect_cmd,
    mapping,
    merge,
)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to settings database file (overrides CONTAREC_DB_PATH environment variable)",
    envvar="CONTAREC_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debugging details to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Contarec - Ledger and ANAF statement reconciliation.

    Sum the accounts of accounting ledger exports and ANAF tax statements
    over matching date intervals and report the differences between mapped
    accounts.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)

    # Open the settings store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        ctx.call_on_close(store.disconnect)
        ctx.obj["store"] = store
        try:
            ctx.obj["state"] = ReconciliationState.from_settings(store.load())
        except DomainError as e:
            click.echo(f"Error: Stored settings are invalid: {e}", err=True)
            ctx.exit(1)


# Register all commands
inspect_cmd.register_commands(cli)
calculate.register_commands(cli)
account.register_commands(cli)
mapping.register_commands(cli)
merge.register_commands(cli)
dates.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
