"""Cycle-level reporting endpoints: capital, members, share-out and quotes"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from rosca_ledger.api.v1.schemas import (
    CycleSummaryResponse,
    MemberExposureItem,
    MemberExposureResponse,
    PayoutSchema,
    ShareOutResponse,
    SavingInterestRequest,
    SavingInterestResponse,
    LossRecoveryRequest,
    LossRecoveryResponse,
)
from rosca_ledger.api.dependencies import get_clock, get_ledger_repository, get_request_id
from rosca_ledger.infrastructure.database.repositories import LedgerRepository
from rosca_ledger.domain.capital import calculate_cycle_capital, summarize_cycle
from rosca_ledger.domain.interest import calculate_saving_interest
from rosca_ledger.domain.losses import calculate_group_loss_recovery
from rosca_ledger.domain.membership import is_membership_paid, summarize_member_exposure
from rosca_ledger.domain.payout import calculate_member_share_out
from rosca_ledger.domain.models import LedgerSnapshot
from rosca_ledger.domain.exceptions import CycleNotFoundError, InvalidSavingPeriodError
from rosca_ledger.infrastructure.observability.metrics import record_computation, cycle_not_found_counter
from rosca_ledger.infrastructure.observability.logging import log_computation
from rosca_ledger.utils.date_utils import Clock

router = APIRouter()


def load_snapshot(repo: LedgerRepository, cycle_id: str, request_id: str) -> LedgerSnapshot:
    """Fetch a cycle snapshot, mapping an unknown cycle to 404"""
    try:
        return repo.get_snapshot(cycle_id)
    except CycleNotFoundError as e:
        cycle_not_found_counter.inc()
        logging.warning(f"Cycle lookup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Cycle not found")


@router.get("/cycles/{cycle_id}/summary", response_model=CycleSummaryResponse)
def get_cycle_summary(
    cycle_id: str,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
):
    """
    Headline figures for a cycle.

    Capital = savings + payments - disbursed principal, never below zero.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_snapshot(repo, cycle_id, request_id)

    summary = summarize_cycle(
        snapshot.cycle, snapshot.savings, snapshot.loans, snapshot.payments, snapshot.memberships
    )

    record_computation("summary")
    log_computation(request_id, cycle_id, "summary", (time.time() - start_time) * 1000)

    return CycleSummaryResponse(
        cycle_id=summary.cycle_id,
        name=snapshot.cycle.name,
        currency=snapshot.cycle.currency,
        capital=summary.capital,
        total_saved=summary.total_saved,
        total_loans=summary.total_loans,
        total_repayments=summary.total_repayments,
        member_count=summary.member_count,
    )


@router.get("/cycles/{cycle_id}/members", response_model=MemberExposureResponse)
def get_member_exposure(
    cycle_id: str,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
    clock: Clock = Depends(get_clock),
):
    """Savings against outstanding loan balance for every member"""
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_snapshot(repo, cycle_id, request_id)

    exposures = summarize_member_exposure(
        snapshot.cycle,
        snapshot.memberships,
        snapshot.savings,
        snapshot.loans,
        snapshot.payments,
        now=clock(),
    )

    record_computation("members")
    log_computation(request_id, cycle_id, "members", (time.time() - start_time) * 1000)

    return MemberExposureResponse(
        cycle_id=cycle_id,
        members=[
            MemberExposureItem(
                user_id=e.user_id,
                total_saved=e.total_saved,
                loan_balance=e.loan_balance,
                membership_paid=is_membership_paid(e.user_id, cycle_id, snapshot.payments),
            )
            for e in exposures
        ],
    )


@router.get("/cycles/{cycle_id}/share-out", response_model=ShareOutResponse)
def get_share_out(
    cycle_id: str,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
    clock: Clock = Depends(get_clock),
):
    """Net payout of every member, as used when closing a cycle"""
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_snapshot(repo, cycle_id, request_id)
    now = clock()

    payouts = []
    for membership in snapshot.memberships:
        payout = calculate_member_share_out(
            membership.user_id,
            snapshot.cycle,
            snapshot.savings,
            snapshot.loans,
            snapshot.payments,
            snapshot.losses,
            snapshot.member_count,
            now=now,
        )
        payouts.append(
            PayoutSchema(
                user_id=membership.user_id,
                total_saved=payout.total_saved,
                total_interest=payout.total_interest,
                loan_balance=payout.loan_balance,
                unpaid_loss=payout.unpaid_loss,
                net_payout=payout.net_payout,
            )
        )

    record_computation("share_out")
    log_computation(request_id, cycle_id, "share_out", (time.time() - start_time) * 1000)

    return ShareOutResponse(cycle_id=cycle_id, currency=snapshot.cycle.currency, payouts=payouts)


@router.post("/cycles/{cycle_id}/saving-interest", response_model=SavingInterestResponse)
def quote_saving_interest(
    cycle_id: str,
    request_body: SavingInterestRequest,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
):
    """Interest a deposit made in the given period would earn by the end of the cycle"""
    start_time = time.time()
    request_id = get_request_id(request)
    cycle = repo.get_cycle(cycle_id)
    if cycle is None:
        cycle_not_found_counter.inc()
        raise HTTPException(status_code=404, detail="Cycle not found")

    try:
        interest = calculate_saving_interest(
            request_body.amount,
            cycle.interest_rate,
            request_body.period_index,
            cycle.duration_months,
        )
    except InvalidSavingPeriodError as e:
        logging.warning(f"Invalid saving period: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    record_computation("saving_interest")
    log_computation(request_id, cycle_id, "saving_interest", (time.time() - start_time) * 1000)

    return SavingInterestResponse(
        interest_per_month=interest.interest_per_month,
        expected_interest_at_end=interest.expected_interest_at_end,
    )


@router.post("/cycles/{cycle_id}/loss-recovery", response_model=LossRecoveryResponse)
def quote_loss_recovery(
    cycle_id: str,
    request_body: LossRecoveryRequest,
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
):
    """
    Per-member share of interest lost on idle capital.

    Advisory only: booking the resulting loss event is left to the operator.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    snapshot = load_snapshot(repo, cycle_id, request_id)

    unborrowed = request_body.unborrowed_capital
    if unborrowed is None:
        unborrowed = calculate_cycle_capital(cycle_id, snapshot.savings, snapshot.loans, snapshot.payments)

    shared = calculate_group_loss_recovery(unborrowed, snapshot.cycle.interest_rate, snapshot.member_count)

    record_computation("loss_recovery")
    log_computation(request_id, cycle_id, "loss_recovery", (time.time() - start_time) * 1000)

    return LossRecoveryResponse(
        cycle_id=cycle_id,
        unborrowed_capital=unborrowed,
        member_count=snapshot.member_count,
        shared_per_user=shared,
    )
