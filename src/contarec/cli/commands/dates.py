"""Date interval commands."""

import click
from contarec.cli.account_resolution import save_state_or_exit
from contarec.cli.date_filters import period_flags, period_options, resolve_cli_date_range
from contarec.utils.date_parser import format_display


@click.group()
def dates_group():
    """Manage the stored date interval."""
    pass


@dates_group.command("set")
@click.option("--start-date", help="Start date (DD/MM/YYYY or relative like 'last year')")
@click.option("--end-date", help="End date (DD/MM/YYYY or relative like 'today')")
@period_options
@click.option("--clear", is_flag=True, help="Remove the stored interval")
@click.option(
    "--end-of-year/--no-end-of-year",
    "end_of_year",
    default=None,
    help="Compare 31 December on its own in the monthly analysis",
)
@click.pass_context
def set_dates(
    ctx,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    last_month: bool,
    last_year: bool,
    clear: bool,
    end_of_year: bool | None,
):
    """Store the date interval calculations use.

    Examples:
        contarec dates set --start-date 01/01/2024 --end-date 31/12/2024
        contarec dates set --last-year
        contarec dates set --end-of-year
        contarec dates set --clear
    """
    state = ctx.obj["state"]

    if clear:
        state.start_date = None
        state.end_date = None
    else:
        start, end = resolve_cli_date_range(
            ctx,
            start_date=start_date,
            end_date=end_date,
            period_flags=period_flags(this_month, this_year, last_month, last_year),
        )
        if start is None and end is None and end_of_year is None:
            click.echo(
                "Error: Give --start-date, --end-date, a period option, "
                "--end-of-year or --clear.",
                err=True,
            )
            ctx.exit(1)
        if start is not None:
            state.start_date = format_display(start)
        if end is not None:
            state.end_date = format_display(end)

    if end_of_year is not None:
        state.include_end_of_year = end_of_year

    save_state_or_exit(ctx)
    _echo_interval(state)


@dates_group.command("show")
@click.pass_context
def show_dates(ctx):
    """Show the stored date interval."""
    _echo_interval(ctx.obj["state"])


def _echo_interval(state) -> None:
    if not state.start_date and not state.end_date:
        click.echo("No date interval set (all dates)")
    else:
        click.echo(f"Start date: {state.start_date or '(open)'}")
        click.echo(f"End date:   {state.end_date or '(open)'}")
    if state.include_end_of_year:
        click.echo("Year end:   31/12 compared with the dues of 25/06")


def register_commands(cli):
    """Register date commands with main CLI."""
    cli.add_command(dates_group, name="dates")
