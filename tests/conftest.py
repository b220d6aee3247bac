"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from rosca_ledger.api.main import create_app
from rosca_ledger.api.dependencies import get_clock
from rosca_ledger.infrastructure.database.models import Base
from rosca_ledger.infrastructure.database.session import get_db
from rosca_ledger.utils.date_utils import fixed_clock
from rosca_ledger.domain.models import (
    Cycle,
    LoanRecord,
    LoanStatus,
    LossRecoveryRecord,
    PaymentRecord,
    PaymentType,
    SavingRecord,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Every test runs against the same pinned instant
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock(NOW)
    return TestClient(app)


@pytest.fixture
def cycle() -> Cycle:
    """Six-month cycle at 10% with a 3x borrowing ratio"""
    return Cycle(
        id="cycle_1",
        name="Harvest Circle",
        interest_rate=0.10,
        duration_months=6,
        saving_min=100,
        saving_max=5000,
        membership_fee=50,
        borrowing_limit_ratio=3,
        created_at=NOW - timedelta(days=60),
    )


@pytest.fixture
def make_saving():
    def _make(amount, user_id="user_a", cycle_id="cycle_1", expected_interest_at_end=0.0, period_index=0):
        return SavingRecord(
            id=f"sav_{user_id}_{amount}",
            cycle_id=cycle_id,
            user_id=user_id,
            amount=amount,
            interest_per_month=0.0,
            expected_interest_at_end=expected_interest_at_end,
            period_index=period_index,
            created_at=NOW - timedelta(days=40),
        )

    return _make


@pytest.fixture
def make_loan():
    def _make(
        amount,
        top_up_amount=0.0,
        user_id="user_a",
        cycle_id="cycle_1",
        status=LoanStatus.ACTIVE,
        age_days=5,
        loan_id="loan_1",
    ):
        return LoanRecord(
            id=loan_id,
            cycle_id=cycle_id,
            user_id=user_id,
            amount=amount,
            top_up_amount=top_up_amount,
            status=status,
            created_at=NOW - timedelta(days=age_days),
        )

    return _make


@pytest.fixture
def make_payment():
    def _make(amount, type=PaymentType.LOAN_REPAYMENT, user_id="user_a", cycle_id="cycle_1"):
        return PaymentRecord(
            id=f"pay_{user_id}_{type.value}_{amount}",
            cycle_id=cycle_id,
            user_id=user_id,
            type=type,
            amount=amount,
            created_at=NOW - timedelta(days=1),
        )

    return _make


@pytest.fixture
def make_loss():
    def _make(shared_per_user, cycle_id="cycle_1", total_loss=None):
        return LossRecoveryRecord(
            id=f"loss_{cycle_id}_{shared_per_user}",
            cycle_id=cycle_id,
            total_loss=total_loss if total_loss is not None else shared_per_user * 4,
            shared_per_user=shared_per_user,
            created_at=NOW - timedelta(days=10),
        )

    return _make
