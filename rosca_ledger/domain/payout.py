"""Member settlement - composes savings, interest, loans and losses into a net payout"""

from datetime import datetime
from typing import Sequence
from rosca_ledger.domain.models import (
    Cycle,
    LoanRecord,
    LossRecoveryRecord,
    PaymentRecord,
    PaymentType,
    Payout,
    SavingRecord,
)
from rosca_ledger.domain.loans import get_loan_details
from rosca_ledger.utils.date_utils import utc_now


def calculate_payout(
    cycle: Cycle,
    user_savings: Sequence[SavingRecord],
    user_loans: Sequence[LoanRecord],
    user_payments: Sequence[PaymentRecord],
    user_losses: Sequence[LossRecoveryRecord],
    member_count: int,
    now: datetime | None = None,
) -> Payout:
    """
    Net settlement for a member whose records are already filtered to one cycle.

    net_payout = (total saved + expected interest) - (loan balance + unpaid loss)

    Each loan's balance comes from get_loan_details with the member's pooled
    repayments, so with several open loans the same repayments are credited
    against each of them.

    Args:
        cycle: Cycle configuration
        user_savings: Member's deposits in the cycle
        user_loans: Member's loans in the cycle
        user_payments: Member's payments in the cycle
        user_losses: Loss events booked for the cycle
        member_count: Members in the cycle; carried for callers, not used in the formula
        now: Reference time for loan status (default: current UTC time)
    """
    if now is None:
        now = utc_now()

    total_saved = sum(s.amount for s in user_savings)
    total_interest = sum(s.expected_interest_at_end for s in user_savings)

    loan_balance = sum(
        get_loan_details(l, cycle, user_payments, now).balance for l in user_loans
    )

    total_loss_liability = sum(l.shared_per_user for l in user_losses)
    total_loss_paid = sum(
        p.amount for p in user_payments if p.type == PaymentType.LOSS_RECOVERY
    )
    unpaid_loss = max(0.0, total_loss_liability - total_loss_paid)

    return Payout(
        total_saved=total_saved,
        total_interest=total_interest,
        loan_balance=loan_balance,
        unpaid_loss=unpaid_loss,
        net_payout=(total_saved + total_interest) - (loan_balance + unpaid_loss),
    )


def calculate_member_share_out(
    user_id: str,
    cycle: Cycle,
    savings: Sequence[SavingRecord],
    loans: Sequence[LoanRecord],
    payments: Sequence[PaymentRecord],
    losses: Sequence[LossRecoveryRecord],
    member_count: int,
    now: datetime | None = None,
) -> Payout:
    """Filter full record collections down to one member and cycle, then compute their payout"""
    user_savings = [s for s in savings if s.user_id == user_id and s.cycle_id == cycle.id]
    user_loans = [l for l in loans if l.user_id == user_id and l.cycle_id == cycle.id]
    user_payments = [p for p in payments if p.user_id == user_id and p.cycle_id == cycle.id]
    user_losses = [l for l in losses if l.cycle_id == cycle.id]

    return calculate_payout(
        cycle, user_savings, user_loans, user_payments, user_losses, member_count, now
    )
