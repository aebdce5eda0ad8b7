"""Utilities for resolving account codes from file names and user input."""

import re
from pathlib import PurePath
from typing import Iterable, Optional

from contarec.domain.errors import NotFoundError, account_not_found

_DIGIT_RUN = re.compile(r"\d+")
_SPREADSHEET_SUFFIX = re.compile(r"\.(xlsx?|csv)$", re.IGNORECASE)

_EXTERNAL_PATTERNS = (
    re.compile(r"fise[_\s]*(\d+)"),
    re.compile(r"cont[_\s]*(\d+)"),
    re.compile(r"account[_\s]*(\d+)"),
    re.compile(r"acc[_\s]*(\d+)"),
    re.compile(r"(\d+)$"),
    re.compile(r"^(\d+)"),
)


def _stem(file_name: str) -> str:
    return _SPREADSHEET_SUFFIX.sub("", PurePath(file_name).name)


def infer_account_from_filename(file_name: str) -> Optional[str]:
    """Infer the account of a single-account ledger export from its file name.

    The longest run of digits wins; among equally long runs the
    lexicographically greater one wins.

    Args:
        file_name: File name or path, with or without extension

    Returns:
        Account code, or None if the name has no digits
    """
    if not file_name:
        return None

    runs = _DIGIT_RUN.findall(_stem(file_name))
    if not runs:
        return None
    return max(runs, key=lambda run: (len(run), run))


def extract_external_account(file_name: str) -> Optional[str]:
    """Extract the account of an ANAF export from its file name.

    Known prefixes (``fise_436``, ``cont_444``, ``account_1``, ``acc_2``) are
    tried first, then digits at the end and at the start of the name.

    Returns:
        Account code, or None if no pattern matches
    """
    if not file_name:
        return None

    clean = _stem(file_name).lower()
    for pattern in _EXTERNAL_PATTERNS:
        match = pattern.search(clean)
        if match:
            return match.group(1)
    return None


def resolve_account(accounts: Iterable[str], account: str) -> str:
    """Resolve user input to one of the known account codes.

    Matching is exact first, then case-insensitive.

    Args:
        accounts: Known account codes
        account: Account code as typed by the user

    Returns:
        The known account code

    Raises:
        NotFoundError: If the account is not known
    """
    known = list(accounts)
    wanted = account.strip()
    if wanted in known:
        return wanted

    for candidate in known:
        if candidate.lower() == wanted.lower():
            return candidate

    raise NotFoundError(account_not_found(wanted))
