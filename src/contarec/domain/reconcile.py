"""Reconciliation domain service.

Runs one calculate action over a ``ReconciliationState``: per-account ledger
and ANAF sums over their effective date ranges, the relations report and,
when asked, the month by month analysis.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from contarec.domain.aggregator import aggregate_external, aggregate_ledger
from contarec.domain.entities import (
    DateInterval,
    MonthlyBreakdown,
    MonthlyRow,
    ReconciliationResult,
)
from contarec.domain.errors import DomainError
from contarec.domain.intervals import (
    conta_effective_range,
    external_effective_range,
    month_interval,
    months_in_range,
)
from contarec.domain.state import ReconciliationState
from contarec.domain.variance import build_relations_report, classify

logger = logging.getLogger(__name__)

NO_FILES_MESSAGE = "No files loaded: load ledger or ANAF files first"
NO_ACCOUNTS_MESSAGE = "No accounts selected: select ledger or ANAF accounts first"

# Year-end closing entries are booked on 31 December and fall due on 25 June
YEAR_END_DAY = 31
YEAR_END_EXTERNAL_MONTH = 6
YEAR_END_EXTERNAL_DAY = 25


class ReconciliationService:
    """Service computing sums and differences for the selected accounts."""

    def __init__(self, state: ReconciliationState):
        """Initialize reconciliation service.

        Args:
            state: Reconciliation state with loaded files and settings
        """
        self.state = state

    def calculate(self, monthly: bool = False) -> ReconciliationResult:
        """Run a calculation.

        Missing files or selections and invalid settings do not raise; the
        result carries a status message instead.

        Args:
            monthly: Also build the month by month analysis

        Returns:
            Reconciliation result
        """
        state = self.state
        if not state.ledger_files and not state.external_files:
            return ReconciliationResult(message=NO_FILES_MESSAGE)
        if not state.selected_ledger_accounts and not state.selected_external_accounts:
            return ReconciliationResult(message=NO_ACCOUNTS_MESSAGE)

        try:
            return self._calculate(monthly)
        except DomainError as e:
            logger.warning("Calculation stopped: %s", e)
            return ReconciliationResult(message=str(e))

    def _calculate(self, monthly: bool) -> ReconciliationResult:
        state = self.state
        user_range = state.user_range()

        ledger_sums: dict[str, float] = {}
        ledger_ranges: dict[str, DateInterval] = {}
        for account in state.selected_ledger_accounts:
            config = state.ledger_config(account)
            effective = conta_effective_range(state.ledger_files, account, user_range, config)
            ledger_ranges[account] = effective
            ledger_sums[account] = aggregate_ledger(
                state.ledger_files, account, config, effective
            )

        external_sums: dict[str, float] = {}
        external_ranges: dict[str, DateInterval] = {}
        for account in state.selected_external_accounts:
            effective = external_effective_range(
                self._ledger_range_for(account, ledger_ranges, user_range),
                months=state.external_shift_months,
                day=state.external_due_day,
            )
            external_ranges[account] = effective
            external_sums[account] = aggregate_external(
                state.external_files,
                account,
                state.external_config(account),
                effective,
                assigned=state.external_account_files.get(account),
            )

        mappings = self._selected_mappings()
        variances = build_relations_report(
            mappings, ledger_sums, external_sums, tolerance=state.balance_tolerance
        )

        breakdowns: tuple[MonthlyBreakdown, ...] = ()
        if monthly:
            breakdowns = tuple(
                self.monthly_breakdown(ledger_account, external_accounts, ledger_ranges)
                for ledger_account, external_accounts in mappings.items()
            )

        logger.info(
            "Calculated %d ledger and %d ANAF account(s)",
            len(ledger_sums),
            len(external_sums),
        )
        return ReconciliationResult(
            ledger_sums=ledger_sums,
            external_sums=external_sums,
            ledger_ranges=ledger_ranges,
            external_ranges=external_ranges,
            variances=tuple(variances),
            monthly=breakdowns,
        )

    def _selected_mappings(self) -> dict[str, list[str]]:
        return {
            ledger_account: list(external_accounts)
            for ledger_account, external_accounts in self.state.account_mappings.items()
            if ledger_account in self.state.selected_ledger_accounts
        }

    def _ledger_range_for(
        self,
        external_account: str,
        ledger_ranges: dict[str, DateInterval],
        user_range: DateInterval,
    ) -> DateInterval:
        # An ANAF account follows the range of the ledger account it is mapped to
        for ledger_account, external_accounts in self.state.account_mappings.items():
            if external_account in external_accounts and ledger_account in ledger_ranges:
                return ledger_ranges[ledger_account]
        return user_range

    def _external_sums(
        self, external_accounts: list[str], intervals: list[DateInterval]
    ) -> tuple[float, ...]:
        state = self.state
        return tuple(
            sum(
                aggregate_external(
                    state.external_files,
                    account,
                    state.external_config(account),
                    interval,
                    assigned=state.external_account_files.get(account),
                )
                for interval in intervals
            )
            for account in external_accounts
        )

    def _monthly_row(
        self,
        ledger_interval: DateInterval,
        external_interval: DateInterval,
        ledger_sum: float,
        external_sums: tuple[float, ...],
        year_end: bool = False,
    ) -> MonthlyRow:
        difference = round(ledger_sum - sum(external_sums), 2)
        return MonthlyRow(
            ledger_interval=ledger_interval,
            external_interval=external_interval,
            ledger_sum=ledger_sum,
            external_sums=external_sums,
            difference=difference,
            status=classify(difference, self.state.monthly_tolerance),
            year_end=year_end,
        )

    def monthly_breakdown(
        self,
        ledger_account: str,
        external_accounts: list[str],
        ledger_ranges: Optional[dict[str, DateInterval]] = None,
    ) -> MonthlyBreakdown:
        """Compare a mapping month by month.

        Each ledger month is compared with the following ANAF month. The
        analysis starts at the first month with a non-zero ledger sum.

        With ``include_end_of_year`` set on the state, 31 December is taken
        out of the December row and compared on its own row with the ANAF
        obligations due on 25 June of the next year. That 25 June is then
        left out of the regular June comparison, except for the first June
        of an analysis that starts before June, whose 25 June belongs to a
        year outside the analysis.
        """
        state = self.state
        ledger_config = state.ledger_config(ledger_account)
        interval = (ledger_ranges or {}).get(ledger_account)
        if interval is None:
            interval = conta_effective_range(
                state.ledger_files, ledger_account, state.user_range(), ledger_config
            )

        months = months_in_range(interval)
        ledger_by_month = [
            aggregate_ledger(
                state.ledger_files, ledger_account, ledger_config, month_interval(year, month)
            )
            for year, month in months
        ]
        first = next((i for i, value in enumerate(ledger_by_month) if value != 0), None)
        if first is None:
            logger.debug("No ledger activity for %s in %s", ledger_account, interval)
            return MonthlyBreakdown(ledger_account, tuple(external_accounts))

        year_end = state.include_end_of_year
        first_month = months[first][1]
        seen_june = False
        rows = []
        for (year, month), ledger_sum in zip(months[first:], ledger_by_month[first:]):
            ledger_interval = month_interval(year, month)
            shifted = ledger_interval.start + relativedelta(months=state.external_shift_months)
            external_interval = month_interval(shifted.year, shifted.month)
            external_intervals = [external_interval]

            if year_end and month == 12:
                ledger_interval = DateInterval(
                    ledger_interval.start, date(year, 12, YEAR_END_DAY - 1)
                )
                ledger_sum = aggregate_ledger(
                    state.ledger_files, ledger_account, ledger_config, ledger_interval
                )

            if shifted.month == YEAR_END_EXTERNAL_MONTH:
                keeps_cutoff = first_month < YEAR_END_EXTERNAL_MONTH and not seen_june
                if year_end and not keeps_cutoff:
                    cutoff = date(shifted.year, YEAR_END_EXTERNAL_MONTH, YEAR_END_EXTERNAL_DAY)
                    external_intervals = [
                        DateInterval(external_interval.start, cutoff - timedelta(days=1)),
                        DateInterval(cutoff + timedelta(days=1), external_interval.end),
                    ]
                seen_june = True

            rows.append(
                self._monthly_row(
                    ledger_interval,
                    external_interval,
                    ledger_sum,
                    self._external_sums(external_accounts, external_intervals),
                )
            )

            if year_end and month == 12:
                rows.append(self._year_end_row(ledger_account, external_accounts, year))

        return MonthlyBreakdown(ledger_account, tuple(external_accounts), tuple(rows))

    def _year_end_row(
        self, ledger_account: str, external_accounts: list[str], year: int
    ) -> MonthlyRow:
        state = self.state
        closing_day = date(year, 12, YEAR_END_DAY)
        ledger_interval = DateInterval(closing_day, closing_day)
        due = date(year + 1, YEAR_END_EXTERNAL_MONTH, YEAR_END_EXTERNAL_DAY)
        external_interval = DateInterval(due, due)
        ledger_sum = aggregate_ledger(
            state.ledger_files,
            ledger_account,
            state.ledger_config(ledger_account),
            ledger_interval,
        )
        return self._monthly_row(
            ledger_interval,
            external_interval,
            ledger_sum,
            self._external_sums(external_accounts, [external_interval]),
            year_end=True,
        )
