"""Concatenation of ANAF exports into one table."""

import logging
from typing import Sequence

from contarec.domain.entities import MergeResult, RawFile
from contarec.domain.errors import ValidationError
from contarec.domain.normalizer import EXTERNAL_HEADER_ROWS, is_empty_cell

logger = logging.getLogger(__name__)

SOURCE_COLUMN = "Source"


def merge_external_files(
    files: Sequence[RawFile],
    header_lines: int = EXTERNAL_HEADER_ROWS,
    column_names_row: int = 1,
) -> MergeResult:
    """Merge ANAF exports sharing the same header.

    The header lines of the first file open the table, each prefixed with a
    ``Source`` cell. Data rows of every file follow, prefixed with their file
    name. Rows with no value in any cell are dropped.

    Args:
        files: Raw ANAF files, in merge order
        header_lines: Number of header lines at the top of every file
        column_names_row: 1-based header line holding the column names,
            compared across files

    Returns:
        Merge result with the merged rows and counts

    Raises:
        ValidationError: If there is nothing to merge or the header line
            count is negative
    """
    if not files:
        raise ValidationError("No files to merge")
    if header_lines < 0:
        raise ValidationError("Header line count cannot be negative")

    first = files[0]
    rows: list[tuple] = [
        (SOURCE_COLUMN, *first.data[i]) for i in range(min(header_lines, first.row_count))
    ]

    names_index = max(column_names_row, 1) - 1
    reference = _row_at(first.data, names_index)
    mismatched = []
    total_data_rows = 0

    for raw in files:
        if _row_at(raw.data, names_index) != reference:
            mismatched.append(raw.file_name)
            logger.warning("Column names of %s differ from %s", raw.file_name, first.file_name)

        kept = 0
        for row in raw.data[header_lines:]:
            if not row or all(is_empty_cell(cell) for cell in row):
                continue
            rows.append((raw.file_name, *row))
            kept += 1
        logger.debug("Merged %d data row(s) from %s", kept, raw.file_name)
        total_data_rows += kept

    return MergeResult(
        rows=tuple(rows),
        total_files=len(files),
        total_data_rows=total_data_rows,
        mismatched_files=tuple(mismatched),
    )


def _row_at(data: Sequence[Sequence], index: int) -> tuple:
    return tuple(data[index]) if index < len(data) else ()
