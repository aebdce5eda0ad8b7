"""Account mapping domain service."""

from typing import Optional

from contarec.domain.defaults import default_mappings
from contarec.domain.errors import (
    ValidationError,
    external_account_unknown,
    ledger_account_not_tracked,
)
from contarec.domain.state import ReconciliationState


class AccountMappingService:
    """Service for managing ledger to ANAF account mappings."""

    def __init__(self, state: ReconciliationState):
        """Initialize mapping service.

        Args:
            state: Reconciliation state holding the mappings
        """
        self.state = state

    def list_mappings(self) -> dict[str, list[str]]:
        """Return a copy of the current mappings."""
        return {
            ledger: list(external) for ledger, external in self.state.account_mappings.items()
        }

    def add_mapping(self, ledger_account: str, external_accounts: list[str]) -> list[str]:
        """Map external accounts to a ledger account.

        Accounts already mapped are not added twice.

        Args:
            ledger_account: Tracked ledger account
            external_accounts: ANAF accounts to add to the mapping

        Returns:
            The external accounts now mapped to the ledger account

        Raises:
            ValidationError: If the ledger account is not tracked or an
                external account is unknown
        """
        if ledger_account not in self.state.ledger_accounts:
            raise ValidationError(ledger_account_not_tracked(ledger_account))
        for account in external_accounts:
            if account not in self.state.external_accounts:
                raise ValidationError(external_account_unknown(account))

        mapped = self.state.account_mappings.setdefault(ledger_account, [])
        for account in external_accounts:
            if account not in mapped:
                mapped.append(account)
        return list(mapped)

    def remove_mapping(
        self, ledger_account: str, external_account: Optional[str] = None
    ) -> None:
        """Remove one external account from a mapping, or the whole mapping.

        Removing the last external account drops the mapping.

        Raises:
            ValidationError: If there is no such mapping
        """
        mapped = self.state.account_mappings.get(ledger_account)
        if mapped is None:
            raise ValidationError(f"No mapping for ledger account '{ledger_account}'")

        if external_account is None:
            del self.state.account_mappings[ledger_account]
            return

        if external_account not in mapped:
            raise ValidationError(
                f"Account '{external_account}' is not mapped to '{ledger_account}'"
            )
        mapped.remove(external_account)
        if not mapped:
            del self.state.account_mappings[ledger_account]

    def reset(self) -> None:
        """Restore the default mappings."""
        self.state.account_mappings = default_mappings()

    def validate(self) -> list[str]:
        """Check every mapping against the tracked accounts.

        Returns:
            Problems found, empty when the mappings are consistent
        """
        problems = []
        for ledger_account, external_accounts in self.state.account_mappings.items():
            if ledger_account not in self.state.ledger_accounts:
                problems.append(ledger_account_not_tracked(ledger_account))
            for account in external_accounts:
                if account not in self.state.external_accounts:
                    problems.append(external_account_unknown(account))
        return problems

    def ensure_valid(self) -> None:
        """Raise on the first inconsistent mapping.

        Raises:
            ValidationError: If a mapping references an unknown account
        """
        problems = self.validate()
        if problems:
            raise ValidationError(problems[0])
