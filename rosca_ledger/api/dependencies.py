"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from rosca_ledger.infrastructure.database.session import get_db
from rosca_ledger.infrastructure.database.repositories import LedgerRepository
from rosca_ledger.utils.date_utils import Clock, utc_now


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> Clock:
    """Time source for overdue detection; overridden in tests to pin 'now'"""
    return utc_now


def get_ledger_repository(db: Session = Depends(get_db)) -> LedgerRepository:
    """Provide ledger repository bound to the request's session"""
    return LedgerRepository(db)
