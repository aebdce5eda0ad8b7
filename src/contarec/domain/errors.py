"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as adding an account twice."""


def unknown_column(name: str, source: str, valid: list[str]) -> str:
    """Return message for a column name that the source does not have."""
    return (
        f"Unknown {source} column '{name}'. "
        f"Must be one of: {', '.join(valid)}"
    )


def nested_subtract_config() -> str:
    """Return message for a subtract config that has its own subtract config."""
    return "A subtract configuration cannot have its own subtract configuration"


def ledger_account_not_tracked(account: str) -> str:
    """Return message for a mapping key that is not a tracked ledger account."""
    return f"Ledger account '{account}' is not tracked"


def external_account_unknown(account: str) -> str:
    """Return message for a mapping value outside the external account universe."""
    return f"External account '{account}' is not a known external account"


def account_already_tracked(account: str) -> str:
    """Return message for adding an account that is already tracked."""
    return f"Account '{account}' is already tracked"


def account_not_found(account: str) -> str:
    """Return message for a missing account."""
    return f"Account '{account}' not found"
