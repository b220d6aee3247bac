"""Member-level endpoints: payout, loans and borrowing power within a cycle"""

import math
import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from rosca_ledger.api.v1.schemas import (
    PayoutSchema,
    LoanDetailsSchema,
    MemberLoansResponse,
    BorrowingPowerResponse,
    LoanEligibilityRequest,
    LoanEligibilityResponse,
)
from rosca_ledger.api.v1.cycles import load_snapshot
from rosca_ledger.api.dependencies import get_clock, get_ledger_repository, get_request_id
from rosca_ledger.infrastructure.database.repositories import LedgerRepository
from rosca_ledger.domain.borrowing import (
    check_loan_eligibility,
    get_borrowing_power,
    get_user_outstanding_loan,
)
from rosca_ledger.domain.loans import get_loan_details
from rosca_ledger.domain.membership import ensure_member
from rosca_ledger.domain.payout import calculate_member_share_out
from rosca_ledger.domain.models import LedgerSnapshot
from rosca_ledger.domain.exceptions import MemberNotFoundError
from rosca_ledger.infrastructure.observability.metrics import record_computation, record_loan_statuses
from rosca_ledger.infrastructure.observability.logging import log_computation
from rosca_ledger.utils.date_utils import Clock

router = APIRouter()


def load_member_snapshot(
    repo: LedgerRepository, cycle_id: str, user_id: str, request_id: str
) -> LedgerSnapshot:
    snapshot = load_snapshot(repo, cycle_id, request_id)
    try:
        ensure_member(user_id, cycle_id, snapshot.memberships)
    except MemberNotFoundError as e:
        logging.warning(f"Member lookup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Member not found in cycle")
    return snapshot


@router.get("/cycles/{cycle_id}/members/{user_id}/payout", response_model=PayoutSchema)
def get_member_payout(
    cycle_id: str,
    user_id: str,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
    clock: Clock = Depends(get_clock),
):
    """
    Net settlement for one member.

    net_payout = (savings + expected interest) - (loan balance + unpaid loss);
    negative when the member owes the group.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_member_snapshot(repo, cycle_id, user_id, request_id)

    payout = calculate_member_share_out(
        user_id,
        snapshot.cycle,
        snapshot.savings,
        snapshot.loans,
        snapshot.payments,
        snapshot.losses,
        snapshot.member_count,
        now=clock(),
    )

    record_computation("payout")
    log_computation(request_id, cycle_id, "payout", (time.time() - start_time) * 1000, user_id=user_id)

    return PayoutSchema(
        user_id=user_id,
        total_saved=payout.total_saved,
        total_interest=payout.total_interest,
        loan_balance=payout.loan_balance,
        unpaid_loss=payout.unpaid_loss,
        net_payout=payout.net_payout,
    )


@router.get("/cycles/{cycle_id}/members/{user_id}/loans", response_model=MemberLoansResponse)
def get_member_loans(
    cycle_id: str,
    user_id: str,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
    clock: Clock = Depends(get_clock),
):
    """Every loan of a member with its derived balance and current status"""
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_member_snapshot(repo, cycle_id, user_id, request_id)
    now = clock()

    user_loans = [l for l in snapshot.loans if l.user_id == user_id]
    details = [get_loan_details(l, snapshot.cycle, snapshot.payments, now) for l in user_loans]

    record_computation("loans")
    record_loan_statuses(details)
    log_computation(request_id, cycle_id, "loans", (time.time() - start_time) * 1000, user_id=user_id)

    return MemberLoansResponse(
        cycle_id=cycle_id,
        user_id=user_id,
        loans=[
            LoanDetailsSchema(
                loan_id=loan.id,
                principal=d.principal,
                interest=d.interest,
                payable=d.payable,
                total_repaid=d.total_repaid,
                balance=d.balance,
                status=d.status,
                is_overdue=d.is_overdue,
                created_at=loan.created_at.isoformat(),
            )
            for loan, d in zip(user_loans, details)
        ],
    )


@router.get("/cycles/{cycle_id}/members/{user_id}/borrowing-power", response_model=BorrowingPowerResponse)
def get_member_borrowing_power(
    cycle_id: str,
    user_id: str,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
    clock: Clock = Depends(get_clock),
):
    """Borrowing ceiling from the member's savings and what they already owe"""
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_member_snapshot(repo, cycle_id, user_id, request_id)

    user_savings = [s for s in snapshot.savings if s.user_id == user_id]
    power = get_borrowing_power(user_savings, snapshot.cycle.borrowing_limit_ratio)
    outstanding = get_user_outstanding_loan(
        user_id, cycle_id, snapshot.loans, snapshot.payments, snapshot.cycle, clock()
    )

    record_computation("borrowing_power")
    log_computation(request_id, cycle_id, "borrowing_power", (time.time() - start_time) * 1000, user_id=user_id)

    return BorrowingPowerResponse.from_power(user_id, power, outstanding)


@router.post(
    "/cycles/{cycle_id}/members/{user_id}/loan-eligibility",
    response_model=LoanEligibilityResponse,
)
def check_member_loan_eligibility(
    cycle_id: str,
    user_id: str,
    request_body: LoanEligibilityRequest,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
    clock: Clock = Depends(get_clock),
):
    """
    Check a proposed loan against the member's borrowing power.

    Nothing is recorded; issuing the loan stays with the caller.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_member_snapshot(repo, cycle_id, user_id, request_id)

    eligibility = check_loan_eligibility(
        user_id,
        snapshot.cycle,
        request_body.amount,
        request_body.top_up_amount,
        snapshot.savings,
        snapshot.loans,
        snapshot.payments,
        now=clock(),
    )

    record_computation("loan_eligibility")
    log_computation(
        request_id, cycle_id, "loan_eligibility", (time.time() - start_time) * 1000, user_id=user_id
    )
    if not eligibility.approved:
        logging.info(
            "Loan proposal rejected",
            extra={
                "request_id": request_id,
                "cycle_id": cycle_id,
                "user_id": user_id,
                "requested_principal": eligibility.requested_principal,
                "outstanding_balance": eligibility.outstanding_balance,
            },
        )

    unbounded = math.isinf(eligibility.borrowing_power)
    return LoanEligibilityResponse(
        approved=eligibility.approved,
        requested_principal=eligibility.requested_principal,
        outstanding_balance=eligibility.outstanding_balance,
        borrowing_power=None if unbounded else eligibility.borrowing_power,
        headroom=None if unbounded else eligibility.headroom,
        unbounded=unbounded,
    )
