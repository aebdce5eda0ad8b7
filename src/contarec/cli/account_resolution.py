"""CLI helpers for account resolution and settings persistence."""

from __future__ import annotations

import click

from contarec.domain.entities import Source
from contarec.domain.state import ReconciliationState
from contarec.utils.account_resolver import resolve_account


def source_for(anaf: bool) -> Source:
    return Source.EXTERNAL if anaf else Source.LEDGER


def resolve_account_or_exit(
    ctx: click.Context, state: ReconciliationState, account: str, source: Source
) -> str:
    """Resolve a tracked account code, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    accounts = state.ledger_accounts if source == Source.LEDGER else state.external_accounts
    try:
        return resolve_account(accounts, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def save_state_or_exit(ctx: click.Context) -> None:
    """Persist the command's state, or exit with a CLI error."""
    store = ctx.obj["store"]
    state = ctx.obj["state"]
    if not store.save(state.to_settings()):
        click.echo("Error: Could not save settings", err=True)
        ctx.exit(1)
