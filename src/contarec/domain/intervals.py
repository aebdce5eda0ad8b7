"""Effective date ranges for ledger and ANAF sums."""

from calendar import monthrange
from datetime import date
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from contarec.domain.aggregator import ledger_row_date
from contarec.domain.entities import (
    AccountFilterConfig,
    DateInterval,
    LedgerColumn,
    LedgerFile,
)
from contarec.domain.matcher import matches

# ANAF reports a ledger month one month later, due on the 25th
EXTERNAL_SHIFT_MONTHS = 1
EXTERNAL_DUE_DAY = 25

_ACCOUNT_FILTER = AccountFilterConfig(
    filter_column=LedgerColumn.ACCOUNT, sum_column=LedgerColumn.CREDIT
)


def observed_range(
    files: Iterable[LedgerFile],
    account: str,
    config: Optional[AccountFilterConfig] = None,
) -> DateInterval:
    """Earliest and latest readable date among an account's ledger rows."""
    config = config or _ACCOUNT_FILTER
    earliest: Optional[date] = None
    latest: Optional[date] = None
    for ledger_file in files:
        for row in ledger_file.rows:
            if not matches(row, account, config, ledger_file.account):
                continue
            day = ledger_row_date(row)
            if day is None:
                continue
            if earliest is None or day < earliest:
                earliest = day
            if latest is None or day > latest:
                latest = day
    return DateInterval(earliest, latest)


def intersect(first: DateInterval, second: DateInterval) -> DateInterval:
    """Intersect two intervals; a bound missing on one side takes the other's."""

    def pick(a: Optional[date], b: Optional[date], choose) -> Optional[date]:
        if a is None:
            return b
        if b is None:
            return a
        return choose(a, b)

    return DateInterval(
        start=pick(first.start, second.start, max),
        end=pick(first.end, second.end, min),
    )


def conta_effective_range(
    files: Iterable[LedgerFile],
    account: str,
    user_range: DateInterval,
    config: Optional[AccountFilterConfig] = None,
) -> DateInterval:
    """Restrict the user's interval to the span the account has data for."""
    return intersect(user_range, observed_range(files, account, config))


def external_effective_range(
    conta_range: DateInterval,
    months: int = EXTERNAL_SHIFT_MONTHS,
    day: int = EXTERNAL_DUE_DAY,
) -> DateInterval:
    """Shift a ledger interval to the matching ANAF reporting window.

    Both bounds move forward by ``months`` and are pinned to ``day`` (clipped
    to the month's length). Missing bounds stay missing.
    """
    shift = relativedelta(months=months, day=day)

    def move(bound: Optional[date]) -> Optional[date]:
        return bound + shift if bound is not None else None

    return DateInterval(move(conta_range.start), move(conta_range.end))


def months_in_range(interval: DateInterval) -> list[tuple[int, int]]:
    """List (year, month) pairs touched by a closed interval."""
    if interval.start is None or interval.end is None:
        return []

    months = []
    current = interval.start.replace(day=1)
    while current <= interval.end:
        months.append((current.year, current.month))
        current += relativedelta(months=1)
    return months


def month_interval(year: int, month: int) -> DateInterval:
    """Whole calendar month as an interval."""
    return DateInterval(
        date(year, month, 1), date(year, month, monthrange(year, month)[1])
    )
