"""Date interval options shared by calculate and dates set."""

from datetime import date
from typing import Optional

import click

from contarec.utils.date_parser import get_date_range, parse_date

PERIOD_OPTIONS = ("this-month", "this-year", "last-month", "last-year")
PERIOD_FLAGS_TEXT = ", ".join(f"--{period}" for period in PERIOD_OPTIONS)

DateRange = tuple[Optional[date], Optional[date]]


def period_options(command):
    """Add one flag per period in PERIOD_OPTIONS."""
    for period in reversed(PERIOD_OPTIONS):
        command = click.option(
            f"--{period}",
            period.replace("-", "_"),
            is_flag=True,
            help=f"Use {period.replace('-', ' ')} as the date interval",
        )(command)
    return command


def period_flags(this_month: bool, this_year: bool, last_month: bool, last_year: bool) -> dict[str, bool]:
    return dict(zip(PERIOD_OPTIONS, (this_month, this_year, last_month, last_year)))


def _fail(ctx, message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def _parse_bound(ctx, label: str, text: Optional[str]) -> Optional[date]:
    if not text:
        return None
    try:
        return parse_date(text)
    except ValueError as e:
        _fail(ctx, f"Invalid {label} date: {e}")


def resolve_cli_date_range(
    ctx,
    *,
    start_date: Optional[str],
    end_date: Optional[str],
    period_flags: dict[str, bool],
    default_range: Optional[tuple[date, date]] = None,
) -> DateRange:
    """Turn --start-date/--end-date or a period flag into dates.

    Args:
        ctx: Click context, used to exit on invalid input
        start_date: Start date as typed (DD/MM/YYYY, ISO or relative)
        end_date: End date as typed
        period_flags: Period name to flag value
        default_range: Range used when nothing is given

    Returns:
        Tuple of (start, end); either may be None for an open bound
    """
    periods = [period for period, is_set in period_flags.items() if is_set]
    if len(periods) > 1:
        _fail(ctx, f"Only one period option ({PERIOD_FLAGS_TEXT}) can be given at a time.")
    if periods and (start_date or end_date):
        _fail(ctx, "Period options cannot be combined with --start-date or --end-date.")

    if periods:
        start, end = get_date_range(periods[0])
    else:
        start = _parse_bound(ctx, "start", start_date)
        end = _parse_bound(ctx, "end", end_date)
        if start is None and end is None and default_range is not None:
            start, end = default_range

    if start is not None and end is not None and start > end:
        _fail(ctx, "Start date must not be after end date.")
    return start, end
