"""Tracked account domain service."""

from typing import Optional

from contarec.domain.aggregator import resolve_file_path
from contarec.domain.entities import AccountFilterConfig, Source
from contarec.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_already_tracked,
    account_not_found,
)
from contarec.domain.state import ReconciliationState


class AccountService:
    """Service for managing tracked accounts and their filter rules."""

    def __init__(self, state: ReconciliationState):
        """Initialize account service.

        Args:
            state: Reconciliation state holding the tracked accounts
        """
        self.state = state

    def _accounts(self, source: Source) -> list[str]:
        if source == Source.LEDGER:
            return self.state.ledger_accounts
        return self.state.external_accounts

    def _configs(self, source: Source) -> dict[str, AccountFilterConfig]:
        if source == Source.LEDGER:
            return self.state.ledger_configs
        return self.state.external_configs

    def list_accounts(self, source: Source) -> list[str]:
        """List tracked accounts of a source."""
        return list(self._accounts(source))

    def add_account(self, source: Source, account: str) -> None:
        """Track a new account.

        Raises:
            ValidationError: If the account code is empty
            ConflictError: If the account is already tracked
        """
        account = account.strip()
        if not account:
            raise ValidationError("Account code cannot be empty")

        accounts = self._accounts(source)
        if account in accounts:
            raise ConflictError(account_already_tracked(account))
        accounts.append(account)

    def remove_account(self, source: Source, account: str) -> None:
        """Stop tracking an account.

        Its filter rule, selection and mappings go with it.

        Raises:
            NotFoundError: If the account is not tracked
        """
        accounts = self._accounts(source)
        if account not in accounts:
            raise NotFoundError(account_not_found(account))
        accounts.remove(account)
        self._configs(source).pop(account, None)

        if source == Source.LEDGER:
            if account in self.state.selected_ledger_accounts:
                self.state.selected_ledger_accounts.remove(account)
            self.state.account_mappings.pop(account, None)
            return

        if account in self.state.selected_external_accounts:
            self.state.selected_external_accounts.remove(account)
        self.state.external_account_files.pop(account, None)
        for ledger_account in list(self.state.account_mappings):
            mapped = self.state.account_mappings[ledger_account]
            if account in mapped:
                mapped.remove(account)
            if not mapped:
                del self.state.account_mappings[ledger_account]

    def get_config(self, source: Source, account: str) -> AccountFilterConfig:
        """Filter rule in effect for an account."""
        if source == Source.LEDGER:
            return self.state.ledger_config(account)
        return self.state.external_config(account)

    def configure_account(
        self, source: Source, account: str, config: Optional[AccountFilterConfig]
    ) -> None:
        """Set an account's filter rule; None restores the default.

        Raises:
            NotFoundError: If the account is not tracked
            ValidationError: If the rule belongs to the other source
        """
        if account not in self._accounts(source):
            raise NotFoundError(account_not_found(account))

        if config is None:
            self._configs(source).pop(account, None)
            return
        if config.source != source:
            raise ValidationError(
                f"Configuration columns do not belong to the {source.value} source"
            )
        self._configs(source)[account] = config

    def select_accounts(self, source: Source, accounts: list[str]) -> list[str]:
        """Choose which tracked accounts the next calculation covers.

        Raises:
            NotFoundError: If an account is not tracked
        """
        tracked = self._accounts(source)
        for account in accounts:
            if account not in tracked:
                raise NotFoundError(account_not_found(account))

        selected = [account for account in tracked if account in accounts]
        if source == Source.LEDGER:
            self.state.selected_ledger_accounts = selected
        else:
            self.state.selected_external_accounts = selected
        return list(selected)

    def assign_files(self, account: str, file_paths: list[str]) -> None:
        """Bind an ANAF account to specific files; an empty list clears it.

        Paths are stored in resolved absolute form.

        Raises:
            NotFoundError: If the ANAF account is not tracked
        """
        if account not in self.state.external_accounts:
            raise NotFoundError(account_not_found(account))
        if file_paths:
            self.state.external_account_files[account] = [
                resolve_file_path(p) for p in file_paths
            ]
        else:
            self.state.external_account_files.pop(account, None)
