"""Differences between ledger accounts and their mapped ANAF accounts."""

from typing import Mapping, Optional, Sequence

from contarec.domain.entities import MappingVariance, VarianceStatus

BALANCE_TOLERANCE = 1.0
MONTHLY_BALANCE_TOLERANCE = 2.0


def classify(difference: float, tolerance: float = BALANCE_TOLERANCE) -> VarianceStatus:
    """Balanced when the absolute difference is under the tolerance."""
    if abs(difference) < tolerance:
        return VarianceStatus.BALANCED
    return VarianceStatus.UNBALANCED


def compute_variance(
    ledger_account: str,
    ledger_sum: Optional[float],
    external_sums: Sequence[float],
    external_accounts: Sequence[str] = (),
    tolerance: float = BALANCE_TOLERANCE,
) -> MappingVariance:
    """Compare one ledger sum with the sum of its mapped ANAF sums.

    The difference is ``ledger_sum - sum(external_sums)`` rounded to cents.
    Without a ledger sum there is nothing to compare and no difference.
    """
    external_total = float(sum(external_sums))
    if ledger_sum is None:
        return MappingVariance(
            ledger_account=ledger_account,
            external_accounts=tuple(external_accounts),
            ledger_sum=None,
            external_sum=external_total,
            difference=None,
            status=VarianceStatus.NO_SUM,
        )

    difference = round(ledger_sum - external_total, 2)
    return MappingVariance(
        ledger_account=ledger_account,
        external_accounts=tuple(external_accounts),
        ledger_sum=ledger_sum,
        external_sum=external_total,
        difference=difference,
        status=classify(difference, tolerance),
    )


def build_relations_report(
    mappings: Mapping[str, Sequence[str]],
    ledger_sums: Mapping[str, float],
    external_sums: Mapping[str, float],
    tolerance: float = BALANCE_TOLERANCE,
) -> list[MappingVariance]:
    """Build one variance per mapped ledger account, in mapping order.

    External accounts without a calculated sum count as zero.
    """
    report = []
    for ledger_account, external_accounts in mappings.items():
        report.append(
            compute_variance(
                ledger_account,
                ledger_sums.get(ledger_account),
                [external_sums.get(account, 0.0) for account in external_accounts],
                external_accounts=external_accounts,
                tolerance=tolerance,
            )
        )
    return report
