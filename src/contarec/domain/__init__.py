"""Domain layer for contarec application."""

from contarec.domain.entities import (
    AccountFilterConfig,
    DateInterval,
    ExternalColumn,
    LedgerColumn,
    NormalizedRow,
    Source,
)
from contarec.domain.errors import DomainError, ValidationError

__all__ = [
    "AccountFilterConfig",
    "DateInterval",
    "ExternalColumn",
    "LedgerColumn",
    "NormalizedRow",
    "Source",
    "DomainError",
    "ValidationError",
]
