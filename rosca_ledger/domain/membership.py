"""Cycle membership lookups and per-member exposure"""

from datetime import datetime
from typing import Iterable, List, Sequence
from rosca_ledger.domain.models import (
    Cycle,
    CycleMembership,
    LoanRecord,
    MemberExposure,
    PaymentRecord,
    PaymentType,
    SavingRecord,
)
from rosca_ledger.domain.loans import get_loan_details
from rosca_ledger.domain.exceptions import MemberNotFoundError
from rosca_ledger.utils.date_utils import utc_now


def is_membership_paid(
    user_id: str,
    cycle_id: str,
    payments: Iterable[PaymentRecord],
) -> bool:
    """True if the member has any MEMBERSHIP_FEE payment in the cycle"""
    return any(
        p.user_id == user_id
        and p.cycle_id == cycle_id
        and p.type == PaymentType.MEMBERSHIP_FEE
        for p in payments
    )


def get_member_ids(cycle_id: str, memberships: Iterable[CycleMembership]) -> List[str]:
    return [m.user_id for m in memberships if m.cycle_id == cycle_id]


def count_members(cycle_id: str, memberships: Iterable[CycleMembership]) -> int:
    return len(get_member_ids(cycle_id, memberships))


def ensure_member(user_id: str, cycle_id: str, memberships: Iterable[CycleMembership]) -> None:
    """
    Raises:
        MemberNotFoundError: If the user has not joined the cycle
    """
    if user_id not in get_member_ids(cycle_id, memberships):
        raise MemberNotFoundError(f"User {user_id} is not a member of cycle {cycle_id}")


def summarize_member_exposure(
    cycle: Cycle,
    memberships: Sequence[CycleMembership],
    savings: Sequence[SavingRecord],
    loans: Sequence[LoanRecord],
    payments: Sequence[PaymentRecord],
    now: datetime | None = None,
) -> List[MemberExposure]:
    """Savings vs. outstanding loan balance for every member of a cycle, in join order"""
    if now is None:
        now = utc_now()

    exposures = []
    for user_id in get_member_ids(cycle.id, memberships):
        total_saved = sum(
            s.amount for s in savings if s.user_id == user_id and s.cycle_id == cycle.id
        )
        loan_balance = sum(
            get_loan_details(l, cycle, payments, now).balance
            for l in loans
            if l.user_id == user_id and l.cycle_id == cycle.id
        )
        exposures.append(
            MemberExposure(user_id=user_id, total_saved=total_saved, loan_balance=loan_balance)
        )

    return exposures
