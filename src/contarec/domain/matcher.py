"""Account matching predicates for ledger and ANAF rows."""

from datetime import date
from typing import Any, Optional, Sequence

from contarec.domain.entities import AccountFilterConfig, LedgerColumn, NormalizedRow
from contarec.utils.date_parser import format_display

# ANAF splits these ledger accounts into obligations filed under account "1"
EXTERNAL_GROUP_PREFIX = "1/"
EXTERNAL_GROUP_ACCOUNT = "1"

# ANAF account 33 also reads the files of the social contribution accounts
EXTERNAL_RELATED_FILE_ACCOUNTS = {
    "33": ("411", "412", "416", "421", "422", "423"),
}


def _cell_text(cell: Any) -> str:
    if cell is None:
        return ""
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    if isinstance(cell, date):
        return format_display(cell)
    return str(cell)


def file_matches_account(
    file_account: Optional[str], account: str, external: bool = False
) -> bool:
    """Check whether a file whose name yields ``file_account`` holds ``account``.

    A sub-account such as ``446.DIV`` rolls up to a ``446`` file. For ANAF
    files an account ``1/4423`` also lives in the file for account ``1``,
    and account ``33`` is also read from the files of accounts 411 to 423
    listed in ``EXTERNAL_RELATED_FILE_ACCOUNTS``.
    """
    if not file_account:
        return False
    if file_account == account:
        return True
    if account.startswith(file_account + "."):
        return True
    if not external:
        return False
    if account.startswith(EXTERNAL_GROUP_PREFIX) and file_account == EXTERNAL_GROUP_ACCOUNT:
        return True
    return file_account in EXTERNAL_RELATED_FILE_ACCOUNTS.get(account, ())


def matches(
    row: NormalizedRow,
    account: str,
    config: AccountFilterConfig,
    file_account: Optional[str] = None,
) -> bool:
    """Check whether a ledger row belongs to an account under a filter rule.

    Args:
        row: Normalized ledger row
        account: Account being summed
        config: Filter rule; its filter column decides the kind of match
        file_account: Account inferred from the row's single-account file

    Returns:
        True when the row belongs to the account
    """
    if config.filter_column == LedgerColumn.ACCOUNT:
        if row.account == account:
            return True
        return file_matches_account(file_account, account)

    value = row[config.filter_column.index]
    if value is None:
        return not config.filter_value
    return config.filter_value in _cell_text(value)


def matches_external(row: Sequence[Any], config: AccountFilterConfig) -> bool:
    """Check whether an ANAF row passes a filter rule.

    ANAF filter columns hold whole codes (``D``, ``DIM``, ``1/4423``), so a
    non-empty filter value must equal the cell.
    """
    if not config.filter_value:
        return True
    index = config.filter_column.index
    if index >= len(row):
        return False
    return _cell_text(row[index]).strip() == config.filter_value
