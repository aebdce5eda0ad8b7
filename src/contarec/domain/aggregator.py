"""Per-account sum aggregation over ledger and ANAF rows.

Every call re-scans the rows it is given; nothing is cached between calls.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from contarec.domain.entities import (
    AccountFilterConfig,
    DateInterval,
    ExternalColumn,
    ExternalFile,
    LedgerFile,
    NormalizedRow,
    Source,
)
from contarec.domain.errors import ValidationError
from contarec.domain.matcher import file_matches_account, matches, matches_external
from contarec.utils.amount_parser import amount_or_zero
from contarec.utils.date_parser import to_date

logger = logging.getLogger(__name__)

EXTERNAL_DATE_COLUMNS = (ExternalColumn.SCADENTA, ExternalColumn.TERM_PLATA)


def _require_source(config: AccountFilterConfig, source: Source) -> None:
    if config.source != source:
        raise ValidationError(
            f"Expected a {source.value} account configuration, got {config.source.value}"
        )


def _within(day: Optional[date], interval: Optional[DateInterval]) -> bool:
    if interval is None or day is None:
        return True
    return interval.contains(day)


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def ledger_row_date(row: NormalizedRow) -> Optional[date]:
    """Parse the date of a ledger row, or None when it is not a date."""
    return to_date(row.date, day_first=True)


def external_row_date(row: Sequence[Any]) -> Optional[date]:
    """Date of an ANAF row: the due date, falling back to the payment term."""
    for column in EXTERNAL_DATE_COLUMNS:
        day = to_date(_cell(row, column.index), day_first=True)
        if day is not None:
            return day
    return None


def _ledger_pass(
    rows: Iterable[NormalizedRow],
    account: str,
    config: AccountFilterConfig,
    interval: Optional[DateInterval],
    file_account: Optional[str],
) -> float:
    total = 0.0
    index = config.sum_column.index
    for row in rows:
        if not matches(row, account, config, file_account):
            continue
        # Rows without a readable date are kept
        if not _within(ledger_row_date(row), interval):
            continue
        total += amount_or_zero(row[index])
    return total


def aggregate(
    rows: Iterable[NormalizedRow],
    account: str,
    config: AccountFilterConfig,
    interval: Optional[DateInterval] = None,
    file_account: Optional[str] = None,
) -> float:
    """Sum one ledger account over normalized rows.

    Args:
        rows: Normalized ledger rows
        account: Account to sum
        config: Filter and sum rule for the account
        interval: Inclusive date interval; None or open bounds do not restrict
        file_account: Account inferred from the rows' single-account file

    Returns:
        The summed value, minus the subtract pass total when the config has
        a subtract rule with a non-empty filter value

    Raises:
        ValidationError: If the config is not a ledger config
    """
    _require_source(config, Source.LEDGER)
    rows = list(rows)
    total = _ledger_pass(rows, account, config, interval, file_account)
    if config.subtracts:
        total -= _ledger_pass(rows, account, config.subtract_config, interval, file_account)
    return total


def aggregate_ledger(
    files: Iterable[LedgerFile],
    account: str,
    config: AccountFilterConfig,
    interval: Optional[DateInterval] = None,
) -> float:
    """Sum one ledger account across every loaded ledger file."""
    total = 0.0
    for ledger_file in files:
        total += aggregate(
            ledger_file.rows, account, config, interval, file_account=ledger_file.account
        )
    logger.debug("Ledger account %s: %.2f", account, total)
    return total


def resolve_file_path(path: str) -> str:
    """Absolute form of a file path, used to compare file assignments."""
    return str(Path(path).resolve())


def select_external_files(
    files: Iterable[ExternalFile],
    account: str,
    assigned: Optional[Sequence[str]] = None,
) -> list[ExternalFile]:
    """Pick the ANAF files holding an account.

    Files explicitly assigned to the account win; otherwise files are chosen
    by the account in their name. Assigned paths are compared after
    resolving, so a relative path and its absolute form name the same file.
    An assignment without a directory part also matches by file name.
    """
    files = list(files)
    if assigned:
        wanted_paths = {resolve_file_path(p) for p in assigned}
        wanted_names = {p for p in assigned if Path(p).name == p}
        return [
            f
            for f in files
            if resolve_file_path(f.file_path) in wanted_paths or f.file_name in wanted_names
        ]
    return [f for f in files if file_matches_account(f.account, account, external=True)]


def _external_pass(
    rows: Iterable[Sequence[Any]],
    config: AccountFilterConfig,
    interval: Optional[DateInterval],
) -> float:
    total = 0.0
    index = config.sum_column.index
    for row in rows:
        day = external_row_date(row)
        # Lines without due date or payment term are totals and notes
        if day is None:
            continue
        if not _within(day, interval):
            continue
        if not matches_external(row, config):
            continue
        total += amount_or_zero(_cell(row, index))
    return total


def aggregate_external(
    files: Iterable[ExternalFile],
    account: str,
    config: AccountFilterConfig,
    interval: Optional[DateInterval] = None,
    assigned: Optional[Sequence[str]] = None,
) -> float:
    """Sum one ANAF account over the files that hold it.

    Raises:
        ValidationError: If the config is not an ANAF config
    """
    _require_source(config, Source.EXTERNAL)
    selected = select_external_files(files, account, assigned)
    rows = [row for external_file in selected for row in external_file.rows]

    total = _external_pass(rows, config, interval)
    if config.subtracts:
        total -= _external_pass(rows, config.subtract_config, interval)
    logger.debug(
        "ANAF account %s over %d file(s): %.2f", account, len(selected), total
    )
    return total
