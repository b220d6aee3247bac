"""Data access layer - reads ledger records and hands the engine immutable snapshots"""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from rosca_ledger.infrastructure.database.models import (
    CycleRow,
    CycleMemberRow,
    SavingRow,
    LoanRow,
    PaymentRow,
    LossRecoveryRow,
)
from rosca_ledger.domain.models import (
    Cycle,
    CycleFrequency,
    CycleMembership,
    LedgerSnapshot,
    LoanRecord,
    LoanStatus,
    LossRecoveryRecord,
    PaymentRecord,
    PaymentType,
    SavingRecord,
)
from rosca_ledger.domain.exceptions import CycleNotFoundError
from rosca_ledger.utils.date_utils import ensure_utc


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_utc(value) if value is not None else None


def to_cycle(row: CycleRow) -> Cycle:
    return Cycle(
        id=row.id,
        name=row.name,
        interest_rate=row.interest_rate,
        duration_months=row.duration_months,
        frequency=CycleFrequency(row.frequency),
        saving_min=row.saving_min,
        saving_max=row.saving_max,
        membership_fee=row.membership_fee,
        borrowing_limit_ratio=row.borrowing_limit_ratio,
        capital=row.capital,
        currency=row.currency,
        is_locked=row.is_locked,
        created_at=_utc(row.created_at),
        manager_ids=tuple(row.manager_ids or ()),
    )


def to_membership(row: CycleMemberRow) -> CycleMembership:
    return CycleMembership(cycle_id=row.cycle_id, user_id=row.user_id, joined_at=_utc(row.joined_at))


def to_saving(row: SavingRow) -> SavingRecord:
    return SavingRecord(
        id=row.id,
        cycle_id=row.cycle_id,
        user_id=row.user_id,
        amount=row.amount,
        interest_per_month=row.interest_per_month,
        expected_interest_at_end=row.expected_interest_at_end,
        period_index=row.period_index,
        created_at=_utc(row.created_at),
        last_updated_at=_utc(row.last_updated_at),
        created_by=row.created_by,
    )


def to_loan(row: LoanRow) -> LoanRecord:
    return LoanRecord(
        id=row.id,
        cycle_id=row.cycle_id,
        user_id=row.user_id,
        amount=row.amount,
        top_up_amount=row.top_up_amount,
        status=LoanStatus(row.status),
        created_at=_utc(row.created_at),
        last_edited_at=_utc(row.last_edited_at),
    )


def to_payment(row: PaymentRow) -> PaymentRecord:
    return PaymentRecord(
        id=row.id,
        cycle_id=row.cycle_id,
        user_id=row.user_id,
        type=PaymentType(row.type),
        amount=row.amount,
        created_at=_utc(row.created_at),
    )


def to_loss(row: LossRecoveryRow) -> LossRecoveryRecord:
    return LossRecoveryRecord(
        id=row.id,
        cycle_id=row.cycle_id,
        total_loss=row.total_loss,
        shared_per_user=row.shared_per_user,
        created_at=_utc(row.created_at),
    )


class LedgerRepository:
    """Repository for cycles and their append-only record streams"""

    def __init__(self, db: Session):
        self.db = db

    def get_cycle(self, cycle_id: str) -> Optional[Cycle]:
        """Fetch a cycle's configuration"""
        row = self.db.get(CycleRow, cycle_id)
        return to_cycle(row) if row else None

    def list_cycles(self) -> List[Cycle]:
        """All cycles, oldest first"""
        rows = self.db.scalars(select(CycleRow).order_by(CycleRow.created_at)).all()
        return [to_cycle(r) for r in rows]

    def get_snapshot(self, cycle_id: str) -> LedgerSnapshot:
        """
        Read every record of a cycle in one pass.

        Raises:
            CycleNotFoundError: If no cycle has this id
        """
        cycle_row = self.db.get(CycleRow, cycle_id)
        if cycle_row is None:
            raise CycleNotFoundError(f"Cycle {cycle_id} not found")

        def rows(model, order_by):
            return self.db.scalars(
                select(model).where(model.cycle_id == cycle_id).order_by(order_by)
            ).all()

        return LedgerSnapshot(
            cycle=to_cycle(cycle_row),
            memberships=tuple(to_membership(r) for r in rows(CycleMemberRow, CycleMemberRow.joined_at)),
            savings=tuple(to_saving(r) for r in rows(SavingRow, SavingRow.created_at)),
            loans=tuple(to_loan(r) for r in rows(LoanRow, LoanRow.created_at)),
            payments=tuple(to_payment(r) for r in rows(PaymentRow, PaymentRow.created_at)),
            losses=tuple(to_loss(r) for r in rows(LossRecoveryRow, LossRecoveryRow.created_at)),
        )

    def find_orphaned_records(self) -> Dict[str, int]:
        """
        Count records whose cycle_id matches no cycle.

        The engine silently ignores such records, so they are surfaced here.
        """
        known = select(CycleRow.id)
        counts = {}
        for name, model in (
            ("saving", SavingRow),
            ("loan", LoanRow),
            ("payment", PaymentRow),
            ("loss_recovery", LossRecoveryRow),
        ):
            count = self.db.scalar(
                select(func.count()).select_from(model).where(model.cycle_id.not_in(known))
            )
            if count:
                counts[name] = count

        if counts:
            logging.warning("Orphaned ledger records found", extra={"orphans": counts})
        return counts

    def add_cycle(self, **fields) -> CycleRow:
        row = CycleRow(**fields)
        self.db.add(row)
        self.db.flush()  # Get ID without committing
        return row

    def add_member(self, cycle_id: str, user_id: str, joined_at: Optional[datetime] = None) -> CycleMemberRow:
        row = CycleMemberRow(cycle_id=cycle_id, user_id=user_id)
        if joined_at is not None:
            row.joined_at = joined_at
        self.db.add(row)
        self.db.flush()
        return row

    def add_saving(self, **fields) -> SavingRow:
        row = SavingRow(**fields)
        self.db.add(row)
        self.db.flush()
        return row

    def add_loan(self, **fields) -> LoanRow:
        row = LoanRow(**fields)
        self.db.add(row)
        self.db.flush()
        return row

    def add_payment(self, **fields) -> PaymentRow:
        row = PaymentRow(**fields)
        self.db.add(row)
        self.db.flush()
        return row

    def add_loss_recovery(self, **fields) -> LossRecoveryRow:
        row = LossRecoveryRow(**fields)
        self.db.add(row)
        self.db.flush()
        return row
