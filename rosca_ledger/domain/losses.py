"""Loss sharing: member liabilities for interest the pool failed to earn"""

from typing import Iterable
from rosca_ledger.domain.models import LossRecoveryRecord, PaymentRecord, PaymentType


def get_user_outstanding_loss(
    user_id: str,
    cycle_id: str,
    losses: Iterable[LossRecoveryRecord],
    payments: Iterable[PaymentRecord],
) -> float:
    """
    Unpaid share of the cycle's recorded losses for one member.

    Every loss event in the cycle counts against every member, including
    members who joined after the event was booked.
    """
    total_liability = sum(l.shared_per_user for l in losses if l.cycle_id == cycle_id)
    total_paid = sum(
        p.amount
        for p in payments
        if p.user_id == user_id
        and p.cycle_id == cycle_id
        and p.type == PaymentType.LOSS_RECOVERY
    )
    return max(0.0, total_liability - total_paid)


def calculate_group_loss_recovery(
    unborrowed_capital: float,
    interest_rate: float,
    member_count: int,
) -> float:
    """Even per-member split of the interest idle capital would have earned"""
    if member_count == 0:
        return 0.0
    total_lost_interest = unborrowed_capital * interest_rate
    return total_lost_interest / member_count
