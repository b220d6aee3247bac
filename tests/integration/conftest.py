"""Seed data shared by the API and repository tests"""

import pytest
from datetime import timedelta
from sqlalchemy.orm import Session
from rosca_ledger.infrastructure.database.repositories import LedgerRepository


@pytest.fixture
def seeded_cycle(db: Session, now) -> str:
    """
    Two-member cycle at 10% over 6 months, borrowing ratio 3.

    user_a: saved 1000, borrowed 800 + 200 top-up 31 days ago, repaid 1090
    user_b: saved 2000, no loans
    One loss event of 25 per member.
    """
    repo = LedgerRepository(db)
    repo.add_cycle(
        id="cycle_1",
        name="Harvest Circle",
        interest_rate=0.10,
        duration_months=6,
        saving_min=100,
        saving_max=5000,
        membership_fee=50,
        borrowing_limit_ratio=3,
        manager_ids=["manager_1"],
        created_at=now - timedelta(days=60),
    )
    repo.add_member("cycle_1", "user_a", joined_at=now - timedelta(days=50))
    repo.add_member("cycle_1", "user_b", joined_at=now - timedelta(days=40))

    repo.add_saving(
        cycle_id="cycle_1", user_id="user_a", amount=1000,
        interest_per_month=100, expected_interest_at_end=600, period_index=0,
        created_at=now - timedelta(days=45),
    )
    repo.add_saving(
        cycle_id="cycle_1", user_id="user_b", amount=2000,
        interest_per_month=200, expected_interest_at_end=1200, period_index=0,
        created_at=now - timedelta(days=39),
    )
    repo.add_loan(
        id="loan_a", cycle_id="cycle_1", user_id="user_a", amount=800, top_up_amount=200,
        status="ACTIVE", created_at=now - timedelta(days=31),
    )
    repo.add_payment(
        cycle_id="cycle_1", user_id="user_a", type="LOAN_REPAYMENT", amount=1090,
        created_at=now - timedelta(days=2),
    )
    repo.add_payment(
        cycle_id="cycle_1", user_id="user_a", type="MEMBERSHIP_FEE", amount=50,
        created_at=now - timedelta(days=50),
    )
    repo.add_payment(
        cycle_id="cycle_1", user_id="user_b", type="MEMBERSHIP_FEE", amount=50,
        created_at=now - timedelta(days=40),
    )
    repo.add_loss_recovery(
        cycle_id="cycle_1", total_loss=50, shared_per_user=25,
        created_at=now - timedelta(days=10),
    )
    db.commit()
    return "cycle_1"
