"""Cycle capital aggregation"""

from typing import Iterable, Sequence
from rosca_ledger.domain.models import (
    Cycle,
    CycleMembership,
    CycleSummary,
    LoanRecord,
    PaymentRecord,
    PaymentType,
    SavingRecord,
)
from rosca_ledger.domain.membership import count_members


def calculate_cycle_capital(
    cycle_id: str,
    savings: Iterable[SavingRecord],
    loans: Iterable[LoanRecord],
    payments: Iterable[PaymentRecord],
) -> float:
    """
    Current liquid pool of a cycle.

    Capital = (total savings + total payments) - total principal disbursed,
    clamped at zero so transient over-lending never shows a negative pool.
    Records belonging to other cycles are ignored.
    """
    total_savings = sum(s.amount for s in savings if s.cycle_id == cycle_id)
    total_payments = sum(p.amount for p in payments if p.cycle_id == cycle_id)
    total_disbursed = sum(
        l.amount + l.top_up_amount for l in loans if l.cycle_id == cycle_id
    )

    return max(0.0, (total_savings + total_payments) - total_disbursed)


def summarize_cycle(
    cycle: Cycle,
    savings: Sequence[SavingRecord],
    loans: Sequence[LoanRecord],
    payments: Sequence[PaymentRecord],
    memberships: Sequence[CycleMembership],
) -> CycleSummary:
    """Dashboard totals for a cycle: capital, savings, disbursed loans, repayment volume"""
    cycle_savings = [s for s in savings if s.cycle_id == cycle.id]
    cycle_loans = [l for l in loans if l.cycle_id == cycle.id]
    cycle_payments = [p for p in payments if p.cycle_id == cycle.id]

    return CycleSummary(
        cycle_id=cycle.id,
        capital=calculate_cycle_capital(cycle.id, cycle_savings, cycle_loans, cycle_payments),
        total_saved=sum(s.amount for s in cycle_savings),
        total_loans=sum(l.amount + l.top_up_amount for l in cycle_loans),
        total_repayments=sum(
            p.amount for p in cycle_payments if p.type == PaymentType.LOAN_REPAYMENT
        ),
        member_count=count_members(cycle.id, memberships),
    )
