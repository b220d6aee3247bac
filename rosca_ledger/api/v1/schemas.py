"""Pydantic schemas for API request/response validation"""

import math
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from rosca_ledger.domain.models import LoanStatus


class CycleSummaryResponse(BaseModel):
    """Response for GET /v1/cycles/{cycle_id}/summary"""

    cycle_id: str
    name: str
    currency: str
    capital: float
    total_saved: float
    total_loans: float
    total_repayments: float
    member_count: int


class MemberExposureItem(BaseModel):
    user_id: str
    total_saved: float
    loan_balance: float
    membership_paid: bool


class MemberExposureResponse(BaseModel):
    """Response for GET /v1/cycles/{cycle_id}/members"""

    cycle_id: str
    members: List[MemberExposureItem]


class PayoutSchema(BaseModel):
    """Member settlement figures"""

    user_id: str
    total_saved: float
    total_interest: float
    loan_balance: float
    unpaid_loss: float
    net_payout: float


class ShareOutResponse(BaseModel):
    """Response for GET /v1/cycles/{cycle_id}/share-out"""

    cycle_id: str
    currency: str
    payouts: List[PayoutSchema]


class SavingInterestRequest(BaseModel):
    """Request body for POST /v1/cycles/{cycle_id}/saving-interest"""

    amount: float = Field(..., gt=0, description="Deposit amount")
    period_index: int = Field(0, ge=0, description="0-based month of the deposit within the cycle")


class SavingInterestResponse(BaseModel):
    interest_per_month: float
    expected_interest_at_end: float


class LossRecoveryRequest(BaseModel):
    """Request body for POST /v1/cycles/{cycle_id}/loss-recovery"""

    unborrowed_capital: Optional[float] = Field(
        None, ge=0, description="Capital that sat idle; defaults to the cycle's current capital"
    )


class LossRecoveryResponse(BaseModel):
    cycle_id: str
    unborrowed_capital: float
    member_count: int
    shared_per_user: float


class LoanDetailsSchema(BaseModel):
    """Single loan with derived balance and status"""

    loan_id: str
    principal: float
    interest: float
    payable: float
    total_repaid: float
    balance: float
    status: LoanStatus
    is_overdue: bool
    created_at: str


class MemberLoansResponse(BaseModel):
    """Response for GET /v1/cycles/{cycle_id}/members/{user_id}/loans"""

    cycle_id: str
    user_id: str
    loans: List[LoanDetailsSchema]


class BorrowingPowerResponse(BaseModel):
    """Borrowing ceiling; `borrowing_power` is null when the cycle sets no cap"""

    user_id: str
    borrowing_power: Optional[float]
    unbounded: bool
    outstanding_balance: float

    @classmethod
    def from_power(cls, user_id: str, power: float, outstanding: float) -> "BorrowingPowerResponse":
        unbounded = math.isinf(power)
        return cls(
            user_id=user_id,
            borrowing_power=None if unbounded else power,
            unbounded=unbounded,
            outstanding_balance=outstanding,
        )


class LoanEligibilityRequest(BaseModel):
    """Request body for POST /v1/cycles/{cycle_id}/members/{user_id}/loan-eligibility"""

    amount: float = Field(..., ge=0, description="Loan amount requested")
    top_up_amount: float = Field(0.0, ge=0, description="Top-up on top of the base amount")


class LoanEligibilityResponse(BaseModel):
    approved: bool
    requested_principal: float
    outstanding_balance: float
    borrowing_power: Optional[float]
    headroom: Optional[float]
    unbounded: bool


class OrphanReportResponse(BaseModel):
    """Response for GET /v1/diagnostics/orphans"""

    clean: bool
    orphans: Dict[str, int] = Field(default_factory=dict, description="Record type -> rows with no matching cycle")
