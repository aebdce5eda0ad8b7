"""Summary workbook writer."""

import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from contarec.domain.entities import (
    DateInterval,
    MergeResult,
    MonthlyBreakdown,
    ReconciliationResult,
)
from contarec.domain.variance import BALANCE_TOLERANCE, MONTHLY_BALANCE_TOLERANCE
from contarec.utils.date_parser import format_display

logger = logging.getLogger(__name__)

RELATIONS_SHEET = "Relations Summary"
ACCOUNTS_SHEET = "Accounts Summary"
MERGED_SHEET = "ANAF Merged Data"
MONTHLY_SHEET_PREFIX = "Monthly_"

RELATIONS_HEADER = ["Conta Account", "ANAF Accounts", "Conta Sum", "ANAF Sum", "Difference", "Status"]
ACCOUNTS_HEADER = ["Account", "Type", "Sum", "Interval Start", "Interval End"]

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")
GROUP_FILL = PatternFill(fill_type="solid", fgColor="FFD0D0D0")
BALANCED_FILL = PatternFill(fill_type="solid", fgColor="FFE8F5E8")
UNBALANCED_FILL = PatternFill(fill_type="solid", fgColor="FFFFEAEA")
MONTHLY_BALANCED_FILL = PatternFill(fill_type="solid", fgColor="FF90EE90")
MONTHLY_UNBALANCED_FILL = PatternFill(fill_type="solid", fgColor="FFFF6B6B")

_INVALID_SHEET_CHARS = re.compile(r"[\\/?*\[\]:]")
MAX_SHEET_NAME = 31


def number_format(value: float) -> str:
    """Whole numbers without decimals, anything else with two."""
    return "0" if float(value).is_integer() else "0.00"


def rounded(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


def sheet_title(name: str) -> str:
    """Make a name usable as a worksheet title."""
    return _INVALID_SHEET_CHARS.sub("_", name)[:MAX_SHEET_NAME]


def _style_header(sheet, row: int = 1, fill: PatternFill = HEADER_FILL) -> None:
    for cell in sheet[row]:
        cell.font = HEADER_FONT
        cell.fill = fill


def _fit_columns(sheet, minimum: int = 10, maximum: int = 50) -> None:
    for index, column in enumerate(sheet.iter_cols(values_only=True), start=1):
        longest = max((len(str(value)) for value in column if value is not None), default=0)
        sheet.column_dimensions[get_column_letter(index)].width = min(
            max(longest + 2, minimum), maximum
        )


def _interval_cells(interval: Optional[DateInterval]) -> list[Any]:
    if interval is None:
        return [None, None]
    return [interval.start, interval.end]


def _set_date_format(cell) -> None:
    if isinstance(cell.value, date):
        cell.number_format = "dd/mm/yyyy"


def write_relations_sheet(
    workbook: Workbook, result: ReconciliationResult, tolerance: float = BALANCE_TOLERANCE
) -> None:
    """One row per mapping; difference cells are green within the tolerance."""
    sheet = workbook.create_sheet(RELATIONS_SHEET)
    sheet.append(RELATIONS_HEADER)
    _style_header(sheet)

    for variance in result.variances:
        sheet.append(
            [
                variance.ledger_account,
                ", ".join(variance.external_accounts),
                rounded(variance.ledger_sum),
                rounded(variance.external_sum),
                variance.difference,
                variance.status.value,
            ]
        )
        row = sheet.max_row
        for column in (3, 4, 5):
            cell = sheet.cell(row=row, column=column)
            if isinstance(cell.value, (int, float)):
                cell.number_format = number_format(cell.value)

        difference = sheet.cell(row=row, column=5)
        if isinstance(difference.value, (int, float)):
            within = -tolerance <= difference.value <= tolerance
            difference.fill = BALANCED_FILL if within else UNBALANCED_FILL

    _fit_columns(sheet)


def write_accounts_sheet(workbook: Workbook, result: ReconciliationResult) -> None:
    """Every calculated account with its sum and effective interval."""
    sheet = workbook.create_sheet(ACCOUNTS_SHEET)
    sheet.append(ACCOUNTS_HEADER)
    _style_header(sheet)

    rows = [
        (account, "Conta", value, result.ledger_ranges.get(account))
        for account, value in result.ledger_sums.items()
    ] + [
        (account, "ANAF", value, result.external_ranges.get(account))
        for account, value in result.external_sums.items()
    ]
    for account, kind, value, interval in rows:
        sheet.append([account, kind, rounded(value), *_interval_cells(interval)])
        row = sheet.max_row
        sheet.cell(row=row, column=3).number_format = number_format(rounded(value))
        for column in (4, 5):
            _set_date_format(sheet.cell(row=row, column=column))

    _fit_columns(sheet)


def write_merged_sheet(workbook: Workbook, merged: MergeResult, header_lines: int = 1) -> None:
    """Merged ANAF rows, the first line styled as the header."""
    sheet = workbook.create_sheet(MERGED_SHEET)
    for row in merged.rows:
        sheet.append(list(row))
    if merged.rows:
        _style_header(sheet)

    for row in sheet.iter_rows(min_row=header_lines + 1):
        for cell in row:
            _set_date_format(cell)

    sheet.column_dimensions["A"].width = 20
    for index in range(2, sheet.max_column + 1):
        sheet.column_dimensions[get_column_letter(index)].width = 15


def write_monthly_sheet(
    workbook: Workbook,
    breakdown: MonthlyBreakdown,
    tolerance: float = MONTHLY_BALANCE_TOLERANCE,
) -> None:
    """Month by month comparison of one mapping.

    Row 1 groups the columns by source, row 2 names them and data starts on
    row 3. The sum of the differences is a formula next to the headers.
    """
    sheet = workbook.create_sheet(sheet_title(MONTHLY_SHEET_PREFIX + breakdown.ledger_account))
    accounts = list(breakdown.external_accounts)
    difference_column = 6 + len(accounts)
    total_column = difference_column + 1

    groups = ["CONTA", None, "ANAF", None, "CONTA"]
    groups += ["ANAF"] + [None] * (len(accounts) - 1) if accounts else []
    sheet.append(groups + [None, "Sum of Differences"])
    sheet.merge_cells(start_row=1, start_column=1, end_row=1, end_column=2)
    sheet.merge_cells(start_row=1, start_column=3, end_row=1, end_column=4)
    if len(accounts) > 1:
        sheet.merge_cells(start_row=1, start_column=6, end_row=1, end_column=5 + len(accounts))
    _style_header(sheet, row=1, fill=GROUP_FILL)

    sheet.append(
        ["Interval Start", "Interval End", "Interval Start", "Interval End", breakdown.ledger_account]
        + accounts
        + ["Difference"]
    )
    _style_header(sheet, row=2)

    for month in breakdown.rows:
        sheet.append(
            _interval_cells(month.ledger_interval)
            + _interval_cells(month.external_interval)
            + [rounded(month.ledger_sum)]
            + [rounded(value) for value in month.external_sums]
            + [month.difference]
        )
        row = sheet.max_row
        for column in range(1, 5):
            _set_date_format(sheet.cell(row=row, column=column))
        for column in range(5, difference_column + 1):
            sheet.cell(row=row, column=column).number_format = "0.00"

        difference = sheet.cell(row=row, column=difference_column)
        within = -tolerance <= month.difference <= tolerance
        difference.fill = MONTHLY_BALANCED_FILL if within else MONTHLY_UNBALANCED_FILL

    letter = get_column_letter(difference_column)
    last_row = max(sheet.max_row, 3)
    total = sheet.cell(row=2, column=total_column)
    total.value = f"=SUM(${letter}$3:${letter}${last_row})"
    total.number_format = "0.00"
    total.font = HEADER_FONT
    total.fill = GROUP_FILL

    sheet.freeze_panes = "A3"
    for index in range(1, total_column + 1):
        sheet.column_dimensions[get_column_letter(index)].width = 15 if index <= 4 else 12
    sheet.column_dimensions[get_column_letter(total_column)].width = 20


def write_summary_workbook(
    output_path: str,
    result: ReconciliationResult,
    merged: Optional[MergeResult] = None,
    balance_tolerance: float = BALANCE_TOLERANCE,
    monthly_tolerance: float = MONTHLY_BALANCE_TOLERANCE,
    merged_header_lines: int = 1,
) -> Path:
    """Write the summary workbook of a calculation.

    Args:
        output_path: Destination .xlsx path
        result: Calculation result
        merged: Merged ANAF data, written as its own sheet when given
        balance_tolerance: Tolerance for the relations difference colors
        monthly_tolerance: Tolerance for the monthly difference colors
        merged_header_lines: Header lines at the top of the merged data

    Returns:
        Path of the written workbook
    """
    workbook = Workbook()
    workbook.remove(workbook.active)

    write_relations_sheet(workbook, result, balance_tolerance)
    write_accounts_sheet(workbook, result)
    if merged is not None:
        write_merged_sheet(workbook, merged, merged_header_lines)
    for breakdown in result.monthly:
        write_monthly_sheet(workbook, breakdown, monthly_tolerance)

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    logger.info("Wrote summary workbook %s", path)
    return path


def write_merged_workbook(output_path: str, merged: MergeResult, header_lines: int = 1) -> Path:
    """Write merged ANAF data as a workbook of its own."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    write_merged_sheet(workbook, merged, header_lines)

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    logger.info("Wrote %d merged row(s) to %s", merged.total_rows, path)
    return path
