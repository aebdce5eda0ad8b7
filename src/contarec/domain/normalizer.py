"""Ledger and ANAF row normalization.

Ledger exports come in two layouts. Multi-account exports carry a header row
and one transaction per row with the account in the fourth column. Rows
with neither an account nor a readable date are totals and are dropped.
Single-account exports ("Fisa contului" reports) have nine lines of report
header, repeat a seven line block at every page break and leave the account
out of the rows entirely; it is taken from the file name instead.
"""

import logging
from typing import Any, Optional, Sequence

from contarec.domain.entities import (
    EXTERNAL_ROW_WIDTH,
    ExternalFile,
    Layout,
    LedgerFile,
    NormalizedRow,
    RawFile,
)
from contarec.utils.account_resolver import (
    extract_external_account,
    infer_account_from_filename,
)
from contarec.utils.date_parser import has_time_component, looks_like_date, to_date

logger = logging.getLogger(__name__)

HEADER_TOKENS = ("data", "cont", "explicatie")
MULTI_ACCOUNT_MIN_CELLS = 12
LEDGER_ROW_WIDTH = 8

SINGLE_ACCOUNT_HEADER_ROWS = 9
SINGLE_ACCOUNT_ROW_WIDTH = 7
STATEMENT_BLOCK_MARKER = "Fisa contului"
STATEMENT_BLOCK_EXTRA_ROWS = 6
TRANSACTION_CELL_COUNTS = (6, 7)

EXTERNAL_HEADER_ROWS = 2


def is_empty_cell(cell: Any) -> bool:
    """Whether a spreadsheet cell holds nothing."""
    if cell is None:
        return True
    if isinstance(cell, str):
        return not cell.strip()
    return False


def count_non_empty(row: Optional[Sequence[Any]]) -> int:
    """Count non-empty cells in a row."""
    if not row:
        return 0
    return sum(1 for cell in row if not is_empty_cell(cell))


def _pad(row: Optional[Sequence[Any]], width: int) -> list[Any]:
    cells = list(row or [])[:width]
    return cells + [None] * (width - len(cells))


def _account_text(cell: Any) -> Any:
    """Render an account cell as text so that 4423 and "4423" compare equal."""
    if isinstance(cell, bool) or cell is None:
        return cell
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    if isinstance(cell, (int, float)):
        return str(cell)
    if isinstance(cell, str):
        return cell.strip()
    return cell


def detect_layout(matrix: Sequence[Sequence[Any]]) -> Layout:
    """Classify a ledger export by its first row.

    Anything that is not clearly a multi-account export is treated as a
    single-account export.
    """
    if not matrix:
        return Layout.SINGLE_ACCOUNT

    first_row = matrix[0] or []
    if count_non_empty(first_row) >= MULTI_ACCOUNT_MIN_CELLS:
        texts = [str(cell).lower() for cell in first_row if not is_empty_cell(cell)]
        if any(token in text for text in texts for token in HEADER_TOKENS):
            return Layout.MULTI_ACCOUNT

    if count_non_empty(first_row) > 0:
        logger.debug("First row is neither empty nor a header, assuming single-account layout")
    return Layout.SINGLE_ACCOUNT


def _starts_statement_block(matrix: Sequence[Sequence[Any]], index: int) -> bool:
    row = matrix[index] or []
    if row and not is_empty_cell(row[0]):
        return False
    if index + 1 >= len(matrix):
        return False
    next_row = matrix[index + 1] or []
    return any(
        isinstance(cell, str) and STATEMENT_BLOCK_MARKER in cell for cell in next_row
    )


def _normalize_multi_account(matrix: Sequence[Sequence[Any]]) -> tuple[list[NormalizedRow], int]:
    rows: list[NormalizedRow] = []
    dropped = 0
    for raw_row in matrix[1:]:
        cells = _pad(raw_row, LEDGER_ROW_WIDTH)
        if count_non_empty(cells) == 0:
            if count_non_empty(raw_row):
                dropped += 1
            continue
        cells[3] = _account_text(cells[3])
        # Totals and footer lines carry neither an account nor a date
        if not str(cells[3] or "").strip() and to_date(cells[0], day_first=True) is None:
            dropped += 1
            continue
        rows.append(NormalizedRow(*cells))
    return rows, dropped


def _normalize_single_account(
    matrix: Sequence[Sequence[Any]], account: Optional[str]
) -> tuple[list[NormalizedRow], int]:
    rows: list[NormalizedRow] = []
    dropped = 0
    index = SINGLE_ACCOUNT_HEADER_ROWS
    while index < len(matrix):
        if _starts_statement_block(matrix, index):
            index += 1 + STATEMENT_BLOCK_EXTRA_ROWS
            continue

        raw_row = matrix[index]
        index += 1
        filled = count_non_empty(raw_row)
        if filled not in TRANSACTION_CELL_COUNTS:
            if filled:
                dropped += 1
            continue

        cells = _pad(raw_row, SINGLE_ACCOUNT_ROW_WIDTH)
        rows.append(NormalizedRow(*cells[:3], account, *cells[3:]))
    return rows, dropped


def normalize_rows(
    matrix: Sequence[Sequence[Any]], layout: Layout, account: Optional[str] = None
) -> list[NormalizedRow]:
    """Convert a ledger cell matrix into normalized 8-field rows.

    Args:
        matrix: Spreadsheet rows as read by the file loader
        layout: Layout detected for the file
        account: Account inserted into single-account rows

    Returns:
        Normalized rows in input order; rows that do not fit the layout are
        left out
    """
    if layout == Layout.MULTI_ACCOUNT:
        rows, _ = _normalize_multi_account(matrix)
    else:
        rows, _ = _normalize_single_account(matrix, account)
    return rows


def normalize_ledger_file(raw: RawFile) -> LedgerFile:
    """Detect the layout of a loaded ledger export and normalize its rows."""
    layout = detect_layout(raw.data)
    account = None
    if layout == Layout.SINGLE_ACCOUNT:
        account = infer_account_from_filename(raw.file_name or raw.file_path)
        rows, dropped = _normalize_single_account(raw.data, account)
    else:
        rows, dropped = _normalize_multi_account(raw.data)

    logger.debug(
        "Normalized %s as %s (account %s): %d rows kept, %d dropped",
        raw.file_name,
        layout.value,
        account,
        len(rows),
        dropped,
    )
    return LedgerFile(
        file_name=raw.file_name,
        file_path=raw.file_path,
        layout=layout,
        account=account,
        rows=tuple(rows),
        dropped_rows=dropped,
    )


def normalize_external_file(
    raw: RawFile, header_lines: int = EXTERNAL_HEADER_ROWS
) -> ExternalFile:
    """Split an ANAF export into header lines and padded data rows.

    The first line holds company details and the second the column names.
    Fully empty rows are dropped.
    """
    header = tuple(tuple(row or ()) for row in raw.data[:header_lines])
    rows = []
    for raw_row in raw.data[header_lines:]:
        if count_non_empty(raw_row) == 0:
            continue
        cells = list(raw_row)
        if len(cells) < EXTERNAL_ROW_WIDTH:
            cells += [None] * (EXTERNAL_ROW_WIDTH - len(cells))
        rows.append(tuple(cells))

    account = extract_external_account(raw.file_name or raw.file_path)
    logger.debug(
        "Loaded ANAF file %s (account %s): %d rows", raw.file_name, account, len(rows)
    )
    return ExternalFile(
        file_name=raw.file_name,
        file_path=raw.file_path,
        account=account,
        header=header,
        rows=tuple(rows),
    )


def detect_date_columns(
    matrix: Sequence[Sequence[Any]], header_lines: int = 1
) -> tuple[list[int], list[int]]:
    """Find date columns by inspecting the first data row.

    Args:
        matrix: Spreadsheet rows
        header_lines: Number of header lines before the first data row

    Returns:
        Tuple of (date column indices, indices of those carrying a time)
    """
    if header_lines >= len(matrix):
        return [], []

    date_columns: list[int] = []
    with_time: list[int] = []
    for index, value in enumerate(matrix[header_lines] or []):
        if looks_like_date(value):
            date_columns.append(index)
            if has_time_component(value):
                with_time.append(index)
    return date_columns, with_time


def column_names(matrix: Sequence[Sequence[Any]], row_index: int = 0) -> list[str]:
    """Read column names from a header row, naming blank cells by position.

    Raises:
        ValueError: If the row index is outside the matrix
    """
    if row_index < 0 or row_index >= len(matrix):
        raise ValueError(
            f"Row index {row_index + 1} exceeds file data ({len(matrix)} rows)"
        )
    return [
        str(name).strip() if not is_empty_cell(name) else f"Column {index + 1}"
        for index, name in enumerate(matrix[row_index] or [])
    ]
