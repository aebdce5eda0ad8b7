"""Amount parsing utilities."""

import math
import re
from typing import Any

_CURRENCY = re.compile(r"(?i)[$€£¥]|\blei\b|\bron\b")
_DECIMAL_COMMA = re.compile(r"^-?\d+,\d{1,2}$")


def parse_amount(amount_str: str) -> float:
    """Parse an amount string into a float.

    Handles various formats:
    - "123.45"
    - "-123.45"
    - "1,234.56"
    - "1.234,56" and "123,45" (decimal comma)
    - "123.45 lei", "RON 123.45"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Float amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = _CURRENCY.sub("", amount_str)
    amount_str = re.sub(r"\s+", "", amount_str)

    if "," in amount_str and "." in amount_str:
        if amount_str.rfind(",") > amount_str.rfind("."):
            amount_str = amount_str.replace(".", "").replace(",", ".")
        else:
            amount_str = amount_str.replace(",", "")
    elif _DECIMAL_COMMA.match(amount_str):
        amount_str = amount_str.replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = float(amount_str)
    except ValueError as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    return -amount if is_negative else amount


def amount_or_zero(value: Any) -> float:
    """Read a cell as a float, treating missing or non-numeric cells as 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        try:
            amount = parse_amount(str(value))
        except ValueError:
            return 0.0
    return amount if math.isfinite(amount) else 0.0
