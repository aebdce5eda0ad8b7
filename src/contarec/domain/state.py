"""Explicit reconciliation state.

All inputs of a calculation live here: tracked accounts, filter rules,
account mappings, the user's date interval and the business constants. The
loaded files are held alongside but are never written to settings.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from contarec.domain.defaults import (
    DEFAULT_EXTERNAL_ACCOUNTS,
    DEFAULT_LEDGER_ACCOUNTS,
    default_external_config,
    default_ledger_config,
    default_mappings,
)
from contarec.domain.entities import (
    AccountFilterConfig,
    DateInterval,
    ExternalFile,
    LedgerFile,
    Source,
)
from contarec.domain.errors import ValidationError
from contarec.domain.intervals import EXTERNAL_DUE_DAY, EXTERNAL_SHIFT_MONTHS
from contarec.domain.variance import BALANCE_TOLERANCE, MONTHLY_BALANCE_TOLERANCE
from contarec.utils.date_parser import parse_display

SETTINGS_KEYS = (
    "ledger_accounts",
    "external_accounts",
    "selected_ledger_accounts",
    "selected_external_accounts",
    "ledger_configs",
    "external_configs",
    "account_mappings",
    "external_account_files",
    "start_date",
    "end_date",
    "balance_tolerance",
    "monthly_tolerance",
    "external_shift_months",
    "external_due_day",
    "include_end_of_year",
)


@dataclass
class ReconciliationState:
    """Everything a calculate action reads."""

    ledger_accounts: list[str] = field(default_factory=lambda: list(DEFAULT_LEDGER_ACCOUNTS))
    external_accounts: list[str] = field(
        default_factory=lambda: list(DEFAULT_EXTERNAL_ACCOUNTS)
    )
    selected_ledger_accounts: list[str] = field(default_factory=list)
    selected_external_accounts: list[str] = field(default_factory=list)
    ledger_configs: dict[str, AccountFilterConfig] = field(default_factory=dict)
    external_configs: dict[str, AccountFilterConfig] = field(default_factory=dict)
    account_mappings: dict[str, list[str]] = field(default_factory=default_mappings)
    external_account_files: dict[str, list[str]] = field(default_factory=dict)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    balance_tolerance: float = BALANCE_TOLERANCE
    monthly_tolerance: float = MONTHLY_BALANCE_TOLERANCE
    external_shift_months: int = EXTERNAL_SHIFT_MONTHS
    external_due_day: int = EXTERNAL_DUE_DAY
    include_end_of_year: bool = False
    ledger_files: list[LedgerFile] = field(default_factory=list)
    external_files: list[ExternalFile] = field(default_factory=list)

    def ledger_config(self, account: str) -> AccountFilterConfig:
        """User rule for a ledger account, or the built-in default."""
        return self.ledger_configs.get(account) or default_ledger_config(account)

    def external_config(self, account: str) -> AccountFilterConfig:
        """User rule for an ANAF account, or the built-in default."""
        return self.external_configs.get(account) or default_external_config(account)

    def user_range(self) -> DateInterval:
        """The user's interval; unparseable date strings leave a bound open."""
        return DateInterval(parse_display(self.start_date), parse_display(self.end_date))

    def clear_files(self) -> None:
        self.ledger_files = []
        self.external_files = []

    def to_settings(self) -> dict[str, Any]:
        """Serialize everything except the loaded files."""
        return {
            "ledger_accounts": list(self.ledger_accounts),
            "external_accounts": list(self.external_accounts),
            "selected_ledger_accounts": list(self.selected_ledger_accounts),
            "selected_external_accounts": list(self.selected_external_accounts),
            "ledger_configs": {
                account: config.to_dict() for account, config in self.ledger_configs.items()
            },
            "external_configs": {
                account: config.to_dict()
                for account, config in self.external_configs.items()
            },
            "account_mappings": {
                ledger: list(external) for ledger, external in self.account_mappings.items()
            },
            "external_account_files": {
                account: list(paths) for account, paths in self.external_account_files.items()
            },
            "start_date": self.start_date,
            "end_date": self.end_date,
            "balance_tolerance": self.balance_tolerance,
            "monthly_tolerance": self.monthly_tolerance,
            "external_shift_months": self.external_shift_months,
            "external_due_day": self.external_due_day,
            "include_end_of_year": self.include_end_of_year,
        }

    @classmethod
    def from_settings(cls, settings: Optional[dict[str, Any]]) -> "ReconciliationState":
        """Rebuild state from stored settings.

        Missing keys take their defaults and unknown keys are ignored.

        Raises:
            ValidationError: If a stored filter rule is invalid
        """
        state = cls()
        if not settings:
            return state

        for key in (
            "ledger_accounts",
            "external_accounts",
            "selected_ledger_accounts",
            "selected_external_accounts",
        ):
            if key in settings and settings[key] is not None:
                setattr(state, key, [str(account) for account in settings[key]])

        state.ledger_configs = _configs_from_settings(
            settings.get("ledger_configs"), Source.LEDGER
        )
        state.external_configs = _configs_from_settings(
            settings.get("external_configs"), Source.EXTERNAL
        )

        if settings.get("account_mappings") is not None:
            state.account_mappings = {
                str(ledger): _unique([str(account) for account in external])
                for ledger, external in settings["account_mappings"].items()
            }
        if settings.get("external_account_files") is not None:
            state.external_account_files = {
                str(account): list(paths)
                for account, paths in settings["external_account_files"].items()
            }

        state.start_date = settings.get("start_date")
        state.end_date = settings.get("end_date")
        state.include_end_of_year = bool(settings.get("include_end_of_year", False))

        try:
            if settings.get("balance_tolerance") is not None:
                state.balance_tolerance = float(settings["balance_tolerance"])
            if settings.get("monthly_tolerance") is not None:
                state.monthly_tolerance = float(settings["monthly_tolerance"])
            if settings.get("external_shift_months") is not None:
                state.external_shift_months = int(settings["external_shift_months"])
            if settings.get("external_due_day") is not None:
                state.external_due_day = int(settings["external_due_day"])
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid numeric setting: {e}")

        return state


def _configs_from_settings(
    data: Optional[dict[str, Any]], source: Source
) -> dict[str, AccountFilterConfig]:
    if not data:
        return {}
    return {
        str(account): AccountFilterConfig.from_dict(config, source)
        for account, config in data.items()
    }


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
