"""SQLAlchemy ORM models for the savings group record store"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Integer, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class CycleRow(Base):
    """Cycle configuration"""

    __tablename__ = "cycle"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    interest_rate = Column(Float, nullable=False)
    duration_months = Column(Integer, nullable=False)
    frequency = Column(Text, nullable=False, default="MONTHLY")
    saving_min = Column(Float, nullable=False, default=0.0)
    saving_max = Column(Float, nullable=False, default=0.0)
    membership_fee = Column(Float, nullable=False, default=0.0)
    borrowing_limit_ratio = Column(Float, nullable=False, default=0.0)
    capital = Column(Float, nullable=False, default=0.0)
    currency = Column(Text, nullable=False, default="USD")
    is_locked = Column(Boolean, nullable=False, default=False)
    manager_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CycleMemberRow(Base):
    """Membership join between users and cycles"""

    __tablename__ = "cycle_member"

    cycle_id = Column(String(36), ForeignKey("cycle.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Text, primary_key=True)
    joined_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


# Record tables keep cycle_id unconstrained: the ledger tolerates orphaned rows
# and reports them instead of rejecting them.


class SavingRow(Base):
    __tablename__ = "saving"

    id = Column(String(36), primary_key=True, default=_new_id)
    cycle_id = Column(String(36), nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    interest_per_month = Column(Float, nullable=False, default=0.0)
    expected_interest_at_end = Column(Float, nullable=False, default=0.0)
    period_index = Column(Integer, nullable=False, default=0)
    created_by = Column(Text, nullable=False, default="system")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_updated_at = Column(DateTime(timezone=True), nullable=True)


class LoanRow(Base):
    __tablename__ = "loan"

    id = Column(String(36), primary_key=True, default=_new_id)
    cycle_id = Column(String(36), nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    top_up_amount = Column(Float, nullable=False, default=0.0)
    status = Column(Text, nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_edited_at = Column(DateTime(timezone=True), nullable=True)


class PaymentRow(Base):
    __tablename__ = "payment"

    id = Column(String(36), primary_key=True, default=_new_id)
    cycle_id = Column(String(36), nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class LossRecoveryRow(Base):
    __tablename__ = "loss_recovery"

    id = Column(String(36), primary_key=True, default=_new_id)
    cycle_id = Column(String(36), nullable=False, index=True)
    total_loss = Column(Float, nullable=False)
    shared_per_user = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
