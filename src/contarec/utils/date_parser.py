"""Date parsing utilities.

Spreadsheet cells arrive as native dates, spreadsheet serial numbers or text
in one of several regional formats. Everything is normalized to
``datetime.date`` for comparison and rendered back as ``DD/MM/YYYY``.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

SERIAL_MIN = 30000
SERIAL_MAX = 100000
SERIAL_EPOCH = date(1900, 1, 1)
# Spreadsheets count a 29 February 1900 that never existed
SERIAL_PHANTOM_LEAP_DAY = 60

MIN_YEAR = 1900
MAX_YEAR = 2100

_ISO_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_SLASH_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DOT_PATTERN = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_DASH_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_YEAR_PATTERN = re.compile(r"\b\d{4}\b")
_YEAR_FIRST_PATTERN = re.compile(r"^\d{4}[-/.]\d{1,2}[-/.]\d{1,2}")

_TIME_PATTERNS = (
    re.compile(r"\d{1,2}:\d{2}"),
    re.compile(r"\d{1,2}:\d{2}:\d{2}"),
    re.compile(r"\d{1,2}:\d{2}\s*(AM|PM)", re.IGNORECASE),
    re.compile(r"T\d{2}:\d{2}"),
)

_MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
_DATE_LIKE_PATTERNS = (
    re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$"),
    re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"),
    re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$"),
    re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}$"),
    re.compile(r"^\d{1,2}/\d{1,2}/\d{2}$"),
    re.compile(rf"^({_MONTHS})\s+\d{{1,2}},?\s+\d{{4}}$", re.IGNORECASE),
    re.compile(rf"^\d{{1,2}}[-/]({_MONTHS})[-/]\d{{4}}$", re.IGNORECASE),
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def serial_to_date(serial: float, preserve_time: bool = False) -> date | datetime:
    """Convert a spreadsheet serial number to a date.

    Serial 1 is 1900-01-01. Serials after 59 are shifted back one day to undo
    the spreadsheet leap-year bug, and serial 60 itself lands on 1900-03-01.

    Args:
        serial: Spreadsheet serial, optionally with a time fraction
        preserve_time: Return a datetime carrying the time fraction

    Returns:
        Date, or datetime when preserve_time is set and a fraction exists
    """
    whole = int(serial)
    if whole == SERIAL_PHANTOM_LEAP_DAY:
        result = date(1900, 3, 1)
    else:
        adjusted = whole - 1 if whole > 59 else whole
        result = SERIAL_EPOCH + timedelta(days=adjusted - 1)

    fraction = serial - whole
    if preserve_time and fraction:
        seconds = round(fraction * 86400)
        return datetime.combine(result, time()) + timedelta(seconds=seconds)
    return result


def _build_date(year: int, month: int, day: int) -> Optional[date]:
    if not (MIN_YEAR <= year <= MAX_YEAR and 1 <= month <= 12 and 1 <= day <= 31):
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_free_form(text: str, day_first: bool) -> datetime:
    """Run dateutil on text, reading a leading four digit year as YYYY-MM-DD.

    dateutil applies ``dayfirst`` to ``2024-03-05`` as well, which would
    swap day and month on ISO dates and timestamps.
    """
    if _YEAR_FIRST_PATTERN.match(text):
        return date_parser.parse(text, yearfirst=True, dayfirst=False)
    return date_parser.parse(text, dayfirst=day_first)


def _parse_text(text: str, day_first: bool, preserve_time: bool) -> Optional[date | datetime]:
    slash_order = (3, 2, 1) if day_first else (3, 1, 2)
    candidates = (
        (_ISO_PATTERN, (1, 2, 3)),
        (_SLASH_PATTERN, slash_order),
        (_DOT_PATTERN, (3, 2, 1)),
        (_DASH_PATTERN, (3, 1, 2)),
    )
    for pattern, (y, m, d) in candidates:
        match = pattern.match(text)
        if match is None:
            continue
        parsed = _build_date(int(match[y]), int(match[m]), int(match[d]))
        if parsed is not None:
            return parsed

    # Free-form text needs at least a four digit year before dateutil sees it
    if not _YEAR_PATTERN.search(text):
        return None
    try:
        parsed_dt = _parse_free_form(text, day_first)
    except (ValueError, OverflowError):
        return None
    if not MIN_YEAR <= parsed_dt.year <= MAX_YEAR:
        return None
    if preserve_time and has_time_component(text):
        return parsed_dt.replace(tzinfo=None)
    return parsed_dt.date()


def parse_date_value(
    value: Any, day_first: bool = True, preserve_time: bool = False
) -> Any:
    """Parse a spreadsheet cell into a date.

    Recognized inputs, in order: native dates, serial numbers in
    [30000, 100000), ``YYYY-MM-DD``, ``DD/MM/YYYY`` (``MM/DD/YYYY`` when
    ``day_first`` is False), ``DD.MM.YYYY``, ``MM-DD-YYYY`` and finally
    free-form text. The calling context decides ``day_first``; it is never
    guessed from the content.

    Args:
        value: Cell value
        day_first: Read ``a/b/yyyy`` as day/month/year
        preserve_time: Keep a time of day when the value carries one

    Returns:
        A date (or datetime with preserve_time), or the original value when
        nothing matched
    """
    if value is None or value == "":
        return value

    if isinstance(value, datetime):
        return value if preserve_time else value.date()

    if isinstance(value, date):
        return value

    if _is_number(value):
        if SERIAL_MIN <= value < SERIAL_MAX:
            return serial_to_date(value, preserve_time=preserve_time)
        return value

    if isinstance(value, str):
        parsed = _parse_text(value.strip(), day_first, preserve_time)
        if parsed is not None:
            return parsed

    return value


def to_date(value: Any, day_first: bool = True) -> Optional[date]:
    """Parse a cell into a date, or None when it is not one."""
    parsed = parse_date_value(value, day_first=day_first)
    if isinstance(parsed, datetime):
        return parsed.date()
    if isinstance(parsed, date):
        return parsed
    return None


def has_time_component(value: Any) -> bool:
    """Check whether a value carries a time of day."""
    if value is None or value == "":
        return False

    if isinstance(value, datetime):
        return bool(value.hour or value.minute or value.second)

    if isinstance(value, date):
        return False

    if _is_number(value):
        return value % 1 != 0

    if isinstance(value, str):
        return any(pattern.search(value) for pattern in _TIME_PATTERNS)

    return False


def looks_like_date(value: Any) -> bool:
    """Check whether a cell looks like a date, for date column detection."""
    if value is None or value == "":
        return False

    if isinstance(value, date):
        return True

    if _is_number(value):
        return SERIAL_MIN <= value < SERIAL_MAX

    if not isinstance(value, str):
        return False

    text = value.strip()
    for pattern in _DATE_LIKE_PATTERNS:
        if not pattern.match(text):
            continue
        if _DOT_PATTERN.match(text):
            day, month, year = (int(part) for part in text.split("."))
            return _build_date(year, month, day) is not None
        return True
    return False


def parse_ddmmyyyy(date_str: Any) -> Optional[str]:
    """Convert a ``DD/MM/YYYY`` or ``DD.MM.YYYY`` string to ISO ``YYYY-MM-DD``.

    Returns:
        ISO date string, or None when the text is not a valid date
    """
    if not date_str or not isinstance(date_str, str):
        return None

    text = date_str.strip()
    if "." in text:
        parts = text.split(".")
    elif "/" in text:
        parts = text.split("/")
    else:
        return None

    if len(parts) != 3:
        return None

    try:
        day, month, year = (int(part) for part in parts)
    except ValueError:
        return None

    if not (1 <= day <= 31 and 1 <= month <= 12):
        return None
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_display(date_str: Any) -> Optional[date]:
    """Parse a ``DD/MM/YYYY`` string into a date, or None."""
    iso = parse_ddmmyyyy(date_str)
    return date.fromisoformat(iso) if iso else None


def format_display(value: Any) -> str:
    """Render a date as ``DD/MM/YYYY``.

    Accepts dates, datetimes, ISO strings and anything
    :func:`parse_date_value` understands. Unparseable values are returned as
    their string form; None renders as an empty string.
    """
    if value is None or value == "":
        return ""

    if isinstance(value, str):
        text = value.strip()
        try:
            value = date.fromisoformat(text)
        except ValueError:
            value = parse_date_value(text)

    if isinstance(value, (date, datetime)):
        return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"

    parsed = parse_date_value(value)
    if isinstance(parsed, date):
        return format_display(parsed)
    return str(value)


def parse_date(date_str: str) -> date:
    """Parse a user supplied date string into a date object.

    Supports various formats including relative dates:
    - Display dates: "15/01/2024", "15.01.2024"
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)

    displayed = parse_display(date_str)
    if displayed is not None:
        return displayed

    try:
        dt = _parse_free_form(date_str, day_first=True)
        return dt.date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Args:
        period: Period string (this-month, this-year, last-month, last-year)

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return (today.replace(day=1), today)

    elif period == "this-year":
        return (today.replace(month=1, day=1), today)

    elif period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        # Day before the first of the current month
        end_date = today.replace(day=1) - timedelta(days=1)
        return (start_date, end_date)

    elif period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        end_date = today.replace(month=1, day=1) - timedelta(days=1)
        return (start_date, end_date)

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, this-year, last-month, last-year"
        )
