"""Utility functions for contarec."""

from contarec.utils.date_parser import parse_date, parse_date_value, format_display
from contarec.utils.amount_parser import parse_amount, amount_or_zero
from contarec.utils.account_resolver import (
    infer_account_from_filename,
    extract_external_account,
    resolve_account,
)

__all__ = [
    "parse_date",
    "parse_date_value",
    "format_display",
    "parse_amount",
    "amount_or_zero",
    "infer_account_from_filename",
    "extract_external_account",
    "resolve_account",
]
