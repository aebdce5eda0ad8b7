"""Domain model entities for contarec.

These are pure data classes describing loaded spreadsheet data, account
filter rules and calculation results, independent of how settings are
persisted or how files are read.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, NamedTuple, Optional, Union

from contarec.domain.errors import (
    ValidationError,
    nested_subtract_config,
    unknown_column,
)


class Source(str, Enum):
    """Data source a file, column or account belongs to."""

    LEDGER = "conta"
    EXTERNAL = "anaf"


class Layout(str, Enum):
    """Ledger export layouts."""

    MULTI_ACCOUNT = "multi-account"
    SINGLE_ACCOUNT = "single-account"


class LedgerColumn(str, Enum):
    """Columns of a normalized ledger row, valued by their export names."""

    DATE = "data"
    DOCUMENT_NUMBER = "ndp"
    DESCRIPTION = "explicatie"
    ACCOUNT = "cont"
    DIRECTION = "tip"
    DEBIT = "suma_d"
    CREDIT = "suma_c"
    BALANCE = "sold"

    @property
    def index(self) -> int:
        return LEDGER_COLUMN_INDEX[self]


class ExternalColumn(str, Enum):
    """Columns of an ANAF export row."""

    IME_COD_IMPOZIT = "IME_COD_IMPOZIT"
    DENUMIRE_IMPOZIT = "DENUMIRE_IMPOZIT"
    SCADENTA = "SCADENTA"
    TERM_PLATA = "TERM_PLATA"
    CTG_SUME = "CTG_SUME"
    SUMA_PLATA = "SUMA_PLATA"
    SUMA_NEACHITATA = "SUMA_NEACHITATA"
    ATRIBUT_PL = "ATRIBUT_PL"
    INCASARI = "INCASARI"
    RAMBURSARI = "RAMBURSARI"

    @property
    def index(self) -> int:
        return EXTERNAL_COLUMN_INDEX[self]


LEDGER_COLUMN_INDEX: dict[LedgerColumn, int] = {
    LedgerColumn.DATE: 0,
    LedgerColumn.DOCUMENT_NUMBER: 1,
    LedgerColumn.DESCRIPTION: 2,
    LedgerColumn.ACCOUNT: 3,
    LedgerColumn.DIRECTION: 4,
    LedgerColumn.DEBIT: 5,
    LedgerColumn.CREDIT: 6,
    LedgerColumn.BALANCE: 7,
}

EXTERNAL_COLUMN_INDEX: dict[ExternalColumn, int] = {
    ExternalColumn.IME_COD_IMPOZIT: 0,
    ExternalColumn.DENUMIRE_IMPOZIT: 1,
    ExternalColumn.SCADENTA: 4,
    ExternalColumn.TERM_PLATA: 5,
    ExternalColumn.CTG_SUME: 6,
    ExternalColumn.SUMA_PLATA: 8,
    ExternalColumn.SUMA_NEACHITATA: 9,
    ExternalColumn.ATRIBUT_PL: 12,
    ExternalColumn.INCASARI: 13,
    ExternalColumn.RAMBURSARI: 14,
}

EXTERNAL_ROW_WIDTH = 15

# English names accepted alongside the export names
LEDGER_COLUMN_ALIASES: dict[str, LedgerColumn] = {
    "date": LedgerColumn.DATE,
    "documentnumber": LedgerColumn.DOCUMENT_NUMBER,
    "document_number": LedgerColumn.DOCUMENT_NUMBER,
    "description": LedgerColumn.DESCRIPTION,
    "account": LedgerColumn.ACCOUNT,
    "direction": LedgerColumn.DIRECTION,
    "debit": LedgerColumn.DEBIT,
    "credit": LedgerColumn.CREDIT,
    "balance": LedgerColumn.BALANCE,
}

LEDGER_FILTER_COLUMNS = frozenset(
    {
        LedgerColumn.ACCOUNT,
        LedgerColumn.DATE,
        LedgerColumn.DESCRIPTION,
        LedgerColumn.DOCUMENT_NUMBER,
    }
)
LEDGER_SUM_COLUMNS = frozenset(
    {LedgerColumn.DEBIT, LedgerColumn.CREDIT, LedgerColumn.BALANCE}
)
EXTERNAL_FILTER_COLUMNS = frozenset(
    {
        ExternalColumn.CTG_SUME,
        ExternalColumn.ATRIBUT_PL,
        ExternalColumn.IME_COD_IMPOZIT,
        ExternalColumn.DENUMIRE_IMPOZIT,
    }
)
EXTERNAL_SUM_COLUMNS = frozenset(
    {
        ExternalColumn.SUMA_PLATA,
        ExternalColumn.INCASARI,
        ExternalColumn.SUMA_NEACHITATA,
        ExternalColumn.RAMBURSARI,
    }
)

Column = Union[LedgerColumn, ExternalColumn]


def parse_column(name: Union[str, Column], source: Source) -> Column:
    """Resolve a column name for a source.

    Raises:
        ValidationError: If the source has no such column
    """
    if source == Source.LEDGER:
        if isinstance(name, LedgerColumn):
            return name
        key = str(name).strip()
        for column in LedgerColumn:
            if column.value == key.lower():
                return column
        alias = LEDGER_COLUMN_ALIASES.get(key.lower())
        if alias is not None:
            return alias
        valid = [c.value for c in LedgerColumn]
    else:
        if isinstance(name, ExternalColumn):
            return name
        key = str(name).strip().upper()
        for column in ExternalColumn:
            if column.value == key:
                return column
        valid = [c.value for c in ExternalColumn]
    raise ValidationError(unknown_column(str(name), source.value, valid))


def column_source(column: Column) -> Source:
    """Return the source a column belongs to."""
    return Source.LEDGER if isinstance(column, LedgerColumn) else Source.EXTERNAL


class NormalizedRow(NamedTuple):
    """Canonical 8-field ledger transaction row."""

    date: Any
    document_number: Any
    description: Any
    account: Any
    direction: Any
    debit_amount: Any
    credit_amount: Any
    balance: Any


@dataclass(frozen=True)
class AccountFilterConfig:
    """Filter and sum rule for one account.

    The subtract configuration, when present, runs a second pass whose total
    is taken off the main total. It cannot itself carry a subtract config.
    """

    filter_column: Column
    sum_column: Column
    filter_value: str = ""
    subtract_config: Optional["AccountFilterConfig"] = None

    def __post_init__(self):
        source = column_source(self.filter_column)
        if column_source(self.sum_column) != source:
            raise ValidationError(
                f"Sum column '{self.sum_column.value}' does not belong to the "
                f"{source.value} source"
            )

        if source == Source.LEDGER:
            filter_columns, sum_columns = LEDGER_FILTER_COLUMNS, LEDGER_SUM_COLUMNS
        else:
            filter_columns, sum_columns = EXTERNAL_FILTER_COLUMNS, EXTERNAL_SUM_COLUMNS

        if self.filter_column not in filter_columns:
            raise ValidationError(
                f"Column '{self.filter_column.value}' cannot be used as a filter column"
            )
        if self.sum_column not in sum_columns:
            raise ValidationError(
                f"Column '{self.sum_column.value}' cannot be used as a sum column"
            )

        if self.subtract_config is not None:
            if self.subtract_config.subtract_config is not None:
                raise ValidationError(nested_subtract_config())
            if self.subtract_config.source != source:
                raise ValidationError(
                    "Subtract configuration must use the same source as its parent"
                )

    @property
    def source(self) -> Source:
        return column_source(self.filter_column)

    @property
    def subtracts(self) -> bool:
        """Whether the subtract pass is active."""
        return self.subtract_config is not None and bool(
            self.subtract_config.filter_value
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filter_column": self.filter_column.value,
            "filter_value": self.filter_value,
            "sum_column": self.sum_column.value,
        }
        if self.subtract_config is not None:
            data["subtract_config"] = self.subtract_config.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Source) -> "AccountFilterConfig":
        """Build a config from a settings mapping.

        Both snake_case and camelCase keys are accepted. A missing sum column
        falls back to the source's default sum column.

        Raises:
            ValidationError: If a column is unknown or the config is invalid
        """
        if not isinstance(data, dict):
            raise ValidationError("Account configuration must be a mapping")

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data:
                    return data[key]
            return None

        default_filter = (
            LedgerColumn.ACCOUNT if source == Source.LEDGER else ExternalColumn.CTG_SUME
        )
        default_sum = (
            LedgerColumn.CREDIT if source == Source.LEDGER else ExternalColumn.SUMA_PLATA
        )

        filter_name = pick("filter_column", "filterColumn")
        sum_name = pick("sum_column", "sumColumn")
        filter_value = pick("filter_value", "filterValue")
        subtract_data = pick("subtract_config", "subtractConfig")

        subtract = None
        if subtract_data:
            subtract = cls.from_dict(subtract_data, source)

        return cls(
            filter_column=parse_column(filter_name, source) if filter_name else default_filter,
            sum_column=parse_column(sum_name, source) if sum_name else default_sum,
            filter_value="" if filter_value is None else str(filter_value),
            subtract_config=subtract,
        )


@dataclass(frozen=True)
class DateInterval:
    """Inclusive date interval; a missing bound is open."""

    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def unbounded(cls) -> "DateInterval":
        return cls(None, None)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(frozen=True)
class RawFile:
    """One spreadsheet as handed over by the file loader."""

    file_name: str
    file_path: str
    data: list[list[Any]]

    @property
    def row_count(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class LedgerFile:
    """Ledger export after layout detection and normalization."""

    file_name: str
    file_path: str
    layout: Layout
    account: Optional[str]
    rows: tuple[NormalizedRow, ...]
    dropped_rows: int = 0


@dataclass(frozen=True)
class ExternalFile:
    """ANAF export with its header lines split from its data rows."""

    file_name: str
    file_path: str
    account: Optional[str]
    header: tuple[tuple[Any, ...], ...]
    rows: tuple[tuple[Any, ...], ...]


class VarianceStatus(str, Enum):
    """Classification of a ledger account against its external accounts."""

    BALANCED = "balanced"
    UNBALANCED = "unbalanced"
    NO_SUM = "no sum calculated"


@dataclass(frozen=True)
class MappingVariance:
    """Difference between one ledger account and its mapped external accounts."""

    ledger_account: str
    external_accounts: tuple[str, ...]
    ledger_sum: Optional[float]
    external_sum: float
    difference: Optional[float]
    status: VarianceStatus


@dataclass(frozen=True)
class MonthlyRow:
    """One month of a monthly analysis.

    A ``year_end`` row compares the 31 December ledger entries with the ANAF
    obligations due on 25 June of the next year.
    """

    ledger_interval: DateInterval
    external_interval: DateInterval
    ledger_sum: float
    external_sums: tuple[float, ...]
    difference: float
    status: VarianceStatus
    year_end: bool = False


@dataclass(frozen=True)
class MonthlyBreakdown:
    """Month by month comparison for one account mapping."""

    ledger_account: str
    external_accounts: tuple[str, ...]
    rows: tuple[MonthlyRow, ...] = ()

    @property
    def ledger_total(self) -> float:
        return sum(row.ledger_sum for row in self.rows)

    @property
    def external_totals(self) -> dict[str, float]:
        totals = {account: 0.0 for account in self.external_accounts}
        for row in self.rows:
            for account, value in zip(self.external_accounts, row.external_sums):
                totals[account] += value
        return totals

    @property
    def sum_of_differences(self) -> float:
        return round(sum(row.difference for row in self.rows), 2)


@dataclass(frozen=True)
class MergeResult:
    """External files concatenated into one matrix."""

    rows: tuple[tuple[Any, ...], ...]
    total_files: int
    total_data_rows: int
    mismatched_files: tuple[str, ...] = ()

    @property
    def total_rows(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ReconciliationResult:
    """Everything produced by one calculate action."""

    ledger_sums: dict[str, float] = field(default_factory=dict)
    external_sums: dict[str, float] = field(default_factory=dict)
    ledger_ranges: dict[str, DateInterval] = field(default_factory=dict)
    external_ranges: dict[str, DateInterval] = field(default_factory=dict)
    variances: tuple[MappingVariance, ...] = ()
    monthly: tuple[MonthlyBreakdown, ...] = ()
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.message is None
