"""Built-in account lists, mappings and filter rules."""

from contarec.domain.entities import AccountFilterConfig, ExternalColumn, LedgerColumn

DEFAULT_LEDGER_ACCOUNTS = (
    "4423",
    "4424",
    "4315",
    "4316",
    "444",
    "436",
    "4411",
    "4418",
    "446.DIV",
    "446.CHIRII",
    "446.CV",
)

DEFAULT_EXTERNAL_ACCOUNTS = (
    "1/4423",
    "1/4424",
    "2",
    "3",
    "7",
    "9",
    "14",
    "33",
    "412",
    "432",
    "451",
    "458",
    "459",
    "461",
    "480",
    "483",
    "628",
)

DEFAULT_ACCOUNT_MAPPINGS: dict[str, tuple[str, ...]] = {
    "436": ("480",),
    "444": ("2", "9"),
    "4315": ("412", "451", "458", "483"),
    "4316": ("432", "459", "461"),
    "4411": ("3",),
    "4418": ("14",),
    "4423": ("1/4423",),
    "4424": ("1/4424",),
    "446.DIV": ("7",),
    "446.CHIRII": ("628",),
    "446.CV": ("33",),
}

# Obligations ANAF files under account "1", split by category code
SPLIT_EXTERNAL_ACCOUNTS = frozenset({"1/4423", "1/4424"})


def default_mappings() -> dict[str, list[str]]:
    """Fresh, mutable copy of the default account mappings."""
    return {ledger: list(external) for ledger, external in DEFAULT_ACCOUNT_MAPPINGS.items()}


def default_ledger_config(account: str) -> AccountFilterConfig:
    """Ledger rule: rows of the account, summing the credit column."""
    return AccountFilterConfig(
        filter_column=LedgerColumn.ACCOUNT,
        filter_value="",
        sum_column=LedgerColumn.CREDIT,
    )


def default_external_config(account: str) -> AccountFilterConfig:
    """ANAF rule for an account.

    Split accounts select their own category code. Every other account sums
    debts (category ``D``) and takes off the receipts of rows marked ``DIM``.
    """
    if account in SPLIT_EXTERNAL_ACCOUNTS:
        return AccountFilterConfig(
            filter_column=ExternalColumn.CTG_SUME,
            filter_value=account,
            sum_column=ExternalColumn.SUMA_PLATA,
        )

    return AccountFilterConfig(
        filter_column=ExternalColumn.CTG_SUME,
        filter_value="D",
        sum_column=ExternalColumn.SUMA_PLATA,
        subtract_config=AccountFilterConfig(
            filter_column=ExternalColumn.ATRIBUT_PL,
            filter_value="DIM",
            sum_column=ExternalColumn.INCASARI,
        ),
    )
