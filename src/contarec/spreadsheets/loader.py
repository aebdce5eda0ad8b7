"""Spreadsheet file loading.

Only the first worksheet of a workbook is read. Cell values are kept as
openpyxl returns them (numbers, dates, text). Legacy ``.xls`` workbooks are
read with xlrd, with date cells turned into datetimes the same way. CSV
cells stay text.
"""

import csv
import logging
from pathlib import Path
from typing import Iterable
from zipfile import BadZipFile

import xlrd
from xlrd.compdoc import CompDocError
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from contarec.domain.entities import RawFile
from contarec.domain.errors import DomainError, ValidationError

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")
LEGACY_WORKBOOK_SUFFIX = ".xls"
CSV_SUFFIX = ".csv"

_XLS_VALUELESS_TYPES = (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR)


def _read_workbook(path: Path) -> list[list]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        if not workbook.worksheets:
            return []
        sheet = workbook.worksheets[0]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _xls_cell(cell_type: int, value, datemode: int):
    if cell_type in _XLS_VALUELESS_TYPES:
        return None
    if cell_type == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(value, datemode)
    return value


def _read_legacy_workbook(path: Path) -> list[list]:
    book = xlrd.open_workbook(str(path), on_demand=True)
    try:
        if not book.nsheets:
            return []
        sheet = book.sheet_by_index(0)
        return [
            [
                _xls_cell(cell_type, value, book.datemode)
                for cell_type, value in zip(sheet.row_types(i), sheet.row_values(i))
            ]
            for i in range(sheet.nrows)
        ]
    finally:
        book.release_resources()


def _read_csv(path: Path) -> list[list]:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        sample = f.read(1024)
        f.seek(0)
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
        except csv.Error:
            delimiter = ","
        return [list(row) for row in csv.reader(f, delimiter=delimiter)]


def load_file(file_path: str) -> RawFile:
    """Read a spreadsheet into a cell matrix.

    Args:
        file_path: Path to an .xlsx, .xls or .csv file

    Returns:
        Raw file with its rows

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file type is not supported or the file
            cannot be parsed
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    suffix = path.suffix.lower()
    try:
        if suffix in WORKBOOK_SUFFIXES:
            data = _read_workbook(path)
        elif suffix == LEGACY_WORKBOOK_SUFFIX:
            data = _read_legacy_workbook(path)
        elif suffix == CSV_SUFFIX:
            data = _read_csv(path)
        else:
            raise ValidationError(
                f"Unsupported file type '{path.suffix}' for {path.name}. "
                f"Use .xlsx, .xls or .csv files"
            )
    except (
        InvalidFileException,
        BadZipFile,
        KeyError,
        xlrd.XLRDError,
        CompDocError,
        csv.Error,
        UnicodeDecodeError,
    ) as e:
        raise ValidationError(f"Cannot read {path.name}: {e}") from e

    logger.debug("Read %d row(s) from %s", len(data), path.name)
    return RawFile(file_name=path.name, file_path=str(path), data=data)


def load_files(file_paths: Iterable[str]) -> list[RawFile]:
    """Read several spreadsheets, skipping the ones that cannot be read."""
    files = []
    for file_path in file_paths:
        try:
            files.append(load_file(file_path))
        except (DomainError, OSError) as e:
            logger.warning("Skipping %s: %s", file_path, e)
    return files
