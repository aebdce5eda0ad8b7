"""Calculation command."""

import click
from contarec.cli.account_resolution import resolve_account_or_exit
from contarec.cli.date_filters import period_flags, period_options, resolve_cli_date_range
from contarec.cli.error_handling import handle_domain_error, handle_write_error
from contarec.domain.entities import DateInterval, ReconciliationResult, Source
from contarec.domain.errors import DomainError
from contarec.domain.merge import merge_external_files
from contarec.domain.normalizer import (
    EXTERNAL_HEADER_ROWS,
    normalize_external_file,
    normalize_ledger_file,
)
from contarec.domain.reconcile import ReconciliationService
from contarec.domain.state import ReconciliationState
from contarec.spreadsheets.loader import load_files
from contarec.spreadsheets.workbook import write_summary_workbook
from contarec.utils.date_parser import format_display


def _format_amount(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


def _format_interval(interval: DateInterval | None) -> str:
    if interval is None:
        return ""
    start = format_display(interval.start) or "..."
    end = format_display(interval.end) or "..."
    return f"{start} - {end}"


def _select_accounts(
    ctx, state: ReconciliationState, accounts: tuple[str, ...], anaf_accounts: tuple[str, ...]
) -> None:
    """Apply the command line account selection to the state."""
    if accounts:
        state.selected_ledger_accounts = [
            resolve_account_or_exit(ctx, state, account, Source.LEDGER) for account in accounts
        ]
    if anaf_accounts:
        state.selected_external_accounts = [
            resolve_account_or_exit(ctx, state, account, Source.EXTERNAL)
            for account in anaf_accounts
        ]
    elif accounts:
        # Follow the mappings of the chosen ledger accounts
        selected: list[str] = []
        for account in state.selected_ledger_accounts:
            for external in state.account_mappings.get(account, []):
                if external in state.external_accounts and external not in selected:
                    selected.append(external)
        state.selected_external_accounts = selected

    if not state.selected_ledger_accounts and not state.selected_external_accounts:
        state.selected_ledger_accounts = list(state.ledger_accounts)
        state.selected_external_accounts = list(state.external_accounts)


def _print_result(result: ReconciliationResult) -> None:
    if result.ledger_sums:
        click.echo("\nConta account sums:")
        click.echo("-" * 70)
        for account, value in result.ledger_sums.items():
            interval = _format_interval(result.ledger_ranges.get(account))
            click.echo(f"{account:15s} {_format_amount(value):>18s}   {interval}")

    if result.external_sums:
        click.echo("\nANAF account sums:")
        click.echo("-" * 70)
        for account, value in result.external_sums.items():
            interval = _format_interval(result.external_ranges.get(account))
            click.echo(f"{account:15s} {_format_amount(value):>18s}   {interval}")

    if result.variances:
        click.echo("\nRelations summary:")
        click.echo("-" * 90)
        click.echo(
            f"{'Conta':12s} {'ANAF':22s} {'Conta sum':>15s} {'ANAF sum':>15s} "
            f"{'Difference':>12s}  Status"
        )
        for variance in result.variances:
            click.echo(
                f"{variance.ledger_account:12s} {', '.join(variance.external_accounts):22s} "
                f"{_format_amount(variance.ledger_sum):>15s} "
                f"{_format_amount(variance.external_sum):>15s} "
                f"{_format_amount(variance.difference):>12s}  {variance.status.value}"
            )

    for breakdown in result.monthly:
        click.echo(f"\nMonthly analysis {breakdown.ledger_account}:")
        click.echo("-" * 90)
        if not breakdown.rows:
            click.echo("No ledger activity in the interval.")
            continue
        for row in breakdown.rows:
            externals = " ".join(_format_amount(value) for value in row.external_sums)
            click.echo(
                f"{_format_interval(row.ledger_interval):25s} "
                f"{_format_amount(row.ledger_sum):>15s}   "
                f"{_format_interval(row.external_interval):25s} {externals:>15s} "
                f"{_format_amount(row.difference):>12s}  {row.status.value}"
                + ("  (year end)" if row.year_end else "")
            )
        click.echo(f"Sum of differences: {_format_amount(breakdown.sum_of_differences)}")


@click.command("calculate")
@click.option(
    "--conta",
    "conta_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Ledger export file (repeatable)",
)
@click.option(
    "--anaf",
    "anaf_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="ANAF statement file (repeatable)",
)
@click.option("--start-date", help="Start date (DD/MM/YYYY or relative like 'last month')")
@click.option("--end-date", help="End date (DD/MM/YYYY or relative like 'today')")
@period_options
@click.option("--account", "accounts", multiple=True, help="Conta account to calculate (repeatable)")
@click.option(
    "--anaf-account", "anaf_accounts", multiple=True, help="ANAF account to calculate (repeatable)"
)
@click.option("--monthly", is_flag=True, help="Add the month by month analysis")
@click.option(
    "--end-of-year/--no-end-of-year",
    "end_of_year",
    default=None,
    help="Compare 31 December on its own with the ANAF dues of 25 June next year "
    "(overrides the stored setting for this run)",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    help="Write the summary workbook (.xlsx) to this path",
)
@click.pass_context
def calculate(
    ctx,
    conta_files: tuple[str, ...],
    anaf_files: tuple[str, ...],
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    last_month: bool,
    last_year: bool,
    accounts: tuple[str, ...],
    anaf_accounts: tuple[str, ...],
    monthly: bool,
    end_of_year: bool | None,
    output: str | None,
):
    """Calculate account sums and the differences between mapped accounts.

    Without a date option the stored interval (see 'contarec dates') is used.
    Without account options the stored selection is used, or every tracked
    account if nothing is selected.

    Examples:
        contarec calculate --conta conta.xlsx --anaf fise_436.xlsx --last-year
        contarec calculate --conta fisa_4423.xlsx --anaf fise_1.xlsx --account 4423
        contarec calculate --conta conta.xlsx --anaf fise_2.xlsx --monthly --output summary.xlsx
        contarec calculate --conta conta.xlsx --anaf fise_2.xlsx --monthly --end-of-year
    """
    state = ctx.obj["state"]

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags(this_month, this_year, last_month, last_year),
    )
    if start is not None or end is not None:
        state.start_date = format_display(start) or None
        state.end_date = format_display(end) or None
    if end_of_year is not None:
        state.include_end_of_year = end_of_year

    ledger_raw = load_files(conta_files)
    external_raw = load_files(anaf_files)
    state.ledger_files = [normalize_ledger_file(raw) for raw in ledger_raw]
    state.external_files = [normalize_external_file(raw) for raw in external_raw]

    _select_accounts(ctx, state, accounts, anaf_accounts)

    result = ReconciliationService(state).calculate(monthly=monthly)
    if not result.ok:
        click.echo(f"Error: {result.message}", err=True)
        ctx.exit(1)

    _print_result(result)

    if output:
        try:
            merged = (
                merge_external_files(external_raw, header_lines=EXTERNAL_HEADER_ROWS)
                if external_raw
                else None
            )
            path = write_summary_workbook(
                output,
                result,
                merged=merged,
                balance_tolerance=state.balance_tolerance,
                monthly_tolerance=state.monthly_tolerance,
                merged_header_lines=EXTERNAL_HEADER_ROWS,
            )
        except DomainError as e:
            handle_domain_error(ctx, e)
        except OSError as e:
            handle_write_error(ctx, output, e)
        click.echo(f"\nSummary written to {path}")


def register_commands(cli):
    """Register calculate command with main CLI."""
    cli.add_command(calculate)
