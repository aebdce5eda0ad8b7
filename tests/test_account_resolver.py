"""Tests for account code resolution from file names and input."""

import pytest
from contarec.domain.errors import NotFoundError
from contarec.utils.account_resolver import (
    extract_external_account,
    infer_account_from_filename,
    resolve_account,
)


def test_infer_account_longest_digit_run():
    """The longest digit run names the account."""
    assert infer_account_from_filename("fise_446.xls") == "446"
    assert infer_account_from_filename("fisa 4423 2024.xlsx") == "4423"
    assert infer_account_from_filename("/tmp/exports/cont_4315_ian.xlsx") == "4315"


def test_infer_account_tie_breaks_on_greater_run():
    """Equally long runs resolve to the lexicographically greater one."""
    assert infer_account_from_filename("4423_4424.xlsx") == "4424"


def test_infer_account_without_digits():
    """Names without digits give no account."""
    assert infer_account_from_filename("registru.xlsx") is None
    assert infer_account_from_filename("") is None


def test_extract_external_account_prefixes():
    """Known prefixes are tried first."""
    assert extract_external_account("fise_436.xlsx") == "436"
    assert extract_external_account("Cont_444.xlsx") == "444"
    assert extract_external_account("account_1.csv") == "1"
    assert extract_external_account("acc_2.xlsx") == "2"


def test_extract_external_account_trailing_then_leading():
    """Trailing digits win over leading ones."""
    assert extract_external_account("obligatii 2024 480.xlsx") == "480"
    assert extract_external_account("628 chirii.xlsx") == "628"
    assert extract_external_account("situatie.xlsx") is None


def test_resolve_account():
    """Input resolves exactly, then case-insensitively."""
    accounts = ["4423", "446.DIV"]
    assert resolve_account(accounts, " 4423 ") == "4423"
    assert resolve_account(accounts, "446.div") == "446.DIV"


def test_resolve_account_not_found():
    """Unknown accounts raise NotFoundError."""
    with pytest.raises(NotFoundError, match="not found"):
        resolve_account(["4423"], "9999")
