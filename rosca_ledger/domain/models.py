"""Domain models - immutable records and computed results for the savings group ledger"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Tuple


class CycleFrequency(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class PaymentType(str, Enum):
    MEMBERSHIP_FEE = "MEMBERSHIP_FEE"
    PENALTY = "PENALTY"
    LOSS_RECOVERY = "LOSS_RECOVERY"
    LOAN_REPAYMENT = "LOAN_REPAYMENT"


@dataclass(frozen=True)
class Cycle:
    """Time-boxed savings pool and the configuration all its calculations use"""

    id: str
    name: str
    interest_rate: float  # decimal fraction, 0.10 == 10%
    duration_months: int
    frequency: CycleFrequency = CycleFrequency.MONTHLY
    saving_min: float = 0.0
    saving_max: float = 0.0
    membership_fee: float = 0.0
    borrowing_limit_ratio: float = 0.0
    capital: float = 0.0  # cached display value, never read by the engine
    currency: str = "USD"
    is_locked: bool = False
    created_at: datetime | None = None
    manager_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CycleMembership:
    cycle_id: str
    user_id: str
    joined_at: datetime


@dataclass(frozen=True)
class SavingRecord:
    """One deposit event; interest figures are fixed at deposit time"""

    id: str
    cycle_id: str
    user_id: str
    amount: float
    interest_per_month: float
    expected_interest_at_end: float
    period_index: int
    created_at: datetime
    last_updated_at: datetime | None = None
    created_by: str = "system"


@dataclass(frozen=True)
class LoanRecord:
    """Loan disbursement. `status` is only a hint; see loans.get_loan_details"""

    id: str
    cycle_id: str
    user_id: str
    amount: float
    top_up_amount: float
    status: LoanStatus
    created_at: datetime
    last_edited_at: datetime | None = None


@dataclass(frozen=True)
class PaymentRecord:
    """Money-in event tagged by purpose"""

    id: str
    cycle_id: str
    user_id: str
    type: PaymentType
    amount: float
    created_at: datetime


@dataclass(frozen=True)
class LossRecoveryRecord:
    """Loss-sharing event; shared_per_user applies to every member of the cycle"""

    id: str
    cycle_id: str
    total_loss: float
    shared_per_user: float
    created_at: datetime


@dataclass(frozen=True)
class SavingInterest:
    interest_per_month: float
    expected_interest_at_end: float


@dataclass(frozen=True)
class LoanDetails:
    """Derived financials and resolved lifecycle status of a single loan"""

    principal: float
    interest: float
    payable: float
    balance: float
    status: LoanStatus
    is_overdue: bool
    total_repaid: float


@dataclass(frozen=True)
class Payout:
    """Member settlement; a negative net_payout means the member owes the group"""

    total_saved: float
    total_interest: float
    loan_balance: float
    unpaid_loss: float
    net_payout: float


@dataclass(frozen=True)
class CycleSummary:
    """Headline figures for a cycle's dashboard"""

    cycle_id: str
    capital: float
    total_saved: float
    total_loans: float
    total_repayments: float
    member_count: int


@dataclass(frozen=True)
class MemberExposure:
    """A member's savings set against their outstanding loan balance"""

    user_id: str
    total_saved: float
    loan_balance: float


@dataclass(frozen=True)
class LoanEligibility:
    """Result of checking a proposed loan against the member's borrowing power"""

    approved: bool
    requested_principal: float
    outstanding_balance: float
    borrowing_power: float
    headroom: float


@dataclass(frozen=True)
class LedgerSnapshot:
    """Consistent read of every record belonging to one cycle"""

    cycle: Cycle
    memberships: Tuple[CycleMembership, ...] = field(default_factory=tuple)
    savings: Tuple[SavingRecord, ...] = field(default_factory=tuple)
    loans: Tuple[LoanRecord, ...] = field(default_factory=tuple)
    payments: Tuple[PaymentRecord, ...] = field(default_factory=tuple)
    losses: Tuple[LossRecoveryRecord, ...] = field(default_factory=tuple)

    @property
    def member_count(self) -> int:
        return len(self.memberships)
