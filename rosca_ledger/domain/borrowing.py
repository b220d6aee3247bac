"""Borrowing power and loan issuance checks"""

import math
from datetime import datetime
from typing import Iterable, Sequence
from rosca_ledger.domain.models import (
    Cycle,
    LoanEligibility,
    LoanRecord,
    PaymentRecord,
    SavingRecord,
)
from rosca_ledger.domain.loans import get_loan_details, PAID_EPSILON


def get_borrowing_power(user_savings: Iterable[SavingRecord], limit_ratio: float) -> float:
    """
    Maximum amount a member may owe, proportional to what they have saved.

    A limit_ratio of 0 means the cycle places no cap and returns math.inf.
    """
    total_saved = sum(s.amount for s in user_savings)
    if limit_ratio == 0:
        return math.inf
    return total_saved * limit_ratio


def get_user_outstanding_loan(
    user_id: str,
    cycle_id: str,
    loans: Iterable[LoanRecord],
    payments: Sequence[PaymentRecord],
    cycle: Cycle,
    now: datetime | None = None,
) -> float:
    """
    Outstanding balance over a member's loans in a cycle.

    Settlement is judged on the recomputed balance; the stored status is ignored.
    """
    balances = [
        get_loan_details(l, cycle, payments, now).balance
        for l in loans
        if l.user_id == user_id and l.cycle_id == cycle_id
    ]
    return sum(b for b in balances if b > PAID_EPSILON)


def check_loan_eligibility(
    user_id: str,
    cycle: Cycle,
    amount: float,
    top_up_amount: float,
    savings: Iterable[SavingRecord],
    loans: Iterable[LoanRecord],
    payments: Sequence[PaymentRecord],
    now: datetime | None = None,
) -> LoanEligibility:
    """
    Decide whether a new loan fits under the member's borrowing power.

    A proposal is rejected when it carries no principal, or when
    (new principal + existing outstanding balance) exceeds the power computed
    from the member's savings in the cycle.
    """
    user_savings = [s for s in savings if s.user_id == user_id and s.cycle_id == cycle.id]
    power = get_borrowing_power(user_savings, cycle.borrowing_limit_ratio)
    outstanding = get_user_outstanding_loan(user_id, cycle.id, loans, payments, cycle, now)
    requested = amount + top_up_amount

    return LoanEligibility(
        approved=requested > 0 and (requested + outstanding) <= power,
        requested_principal=requested,
        outstanding_balance=outstanding,
        borrowing_power=power,
        headroom=max(0.0, power - outstanding),
    )
