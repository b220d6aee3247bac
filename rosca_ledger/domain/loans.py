"""Loan accrual and status resolution - core business logic for member credit"""

import logging
from datetime import datetime, timedelta
from typing import Iterable
from rosca_ledger.domain.models import (
    Cycle,
    LoanDetails,
    LoanRecord,
    LoanStatus,
    PaymentRecord,
    PaymentType,
)
from rosca_ledger.utils.date_utils import ensure_utc, utc_now

# Balances at or below this are treated as settled (absorbs float noise)
PAID_EPSILON = 0.01

# Every loan runs a single 30-day term, whatever the cycle frequency or duration
LOAN_TERM = timedelta(days=30)


def get_total_repaid(
    user_id: str,
    cycle_id: str,
    payments: Iterable[PaymentRecord],
) -> float:
    """Sum of a member's LOAN_REPAYMENT payments in a cycle, pooled across all their loans"""
    return sum(
        p.amount
        for p in payments
        if p.user_id == user_id
        and p.cycle_id == cycle_id
        and p.type == PaymentType.LOAN_REPAYMENT
    )


def get_loan_details(
    loan: LoanRecord,
    cycle: Cycle,
    payments: Iterable[PaymentRecord],
    now: datetime | None = None,
) -> LoanDetails:
    """
    Derive a loan's financials and its current status.

    Loans carry one flat interest period:
    - principal = amount + top_up_amount
    - interest = principal * cycle.interest_rate
    - payable = principal + interest
    - balance = max(0, payable - total repaid)

    Repayments are matched by (user_id, cycle_id), not by loan id, so every
    loan a member holds in a cycle sees the same repayment total.

    Status is recomputed on every call; the stored status is only used when
    the loan is neither settled nor past its term:
    - PAID once balance <= PAID_EPSILON (terminal, payments only accumulate)
    - OVERDUE when unpaid and older than LOAN_TERM
    - otherwise the stored status

    Args:
        loan: Loan record
        cycle: Cycle configuration supplying the interest rate
        payments: Payments to match repayments from
        now: Reference time for overdue detection (default: current UTC time)
    """
    if now is None:
        now = utc_now()

    principal = loan.amount + loan.top_up_amount
    interest = principal * cycle.interest_rate
    payable = principal + interest

    total_repaid = get_total_repaid(loan.user_id, loan.cycle_id, payments)
    balance = max(0.0, payable - total_repaid)

    is_paid = balance <= PAID_EPSILON
    is_overdue = not is_paid and ensure_utc(now) > ensure_utc(loan.created_at) + LOAN_TERM

    status = loan.status or LoanStatus.ACTIVE
    if is_paid:
        status = LoanStatus.PAID
    elif is_overdue:
        status = LoanStatus.OVERDUE

    if loan.cycle_id != cycle.id:
        logging.debug(
            "Loan priced against a different cycle",
            extra={"loan_id": loan.id, "loan_cycle_id": loan.cycle_id, "cycle_id": cycle.id},
        )

    return LoanDetails(
        principal=principal,
        interest=interest,
        payable=payable,
        balance=balance,
        status=status,
        is_overdue=is_overdue,
        total_repaid=total_repaid,
    )
