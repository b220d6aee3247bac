"""Prometheus metrics for monitoring ledger computations and loan health"""

from typing import Iterable
from prometheus_client import Counter, Histogram
from rosca_ledger.domain.models import LoanDetails

# Engine metrics
computation_counter = Counter(
    "rosca_ledger_computation_total",
    "Ledger computations served",
    ["operation"],  # summary | share_out | payout | loans | ...
)

loan_status_counter = Counter(
    "rosca_loan_status_total",
    "Loan statuses resolved while serving requests",
    ["status"],  # ACTIVE | PAID | OVERDUE
)

cycle_not_found_counter = Counter(
    "rosca_cycle_not_found_total",
    "Requests for cycles that do not exist",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_computation(operation: str) -> None:
    computation_counter.labels(operation=operation).inc()


def record_loan_statuses(details: Iterable[LoanDetails]) -> None:
    """Count resolved statuses so overdue build-up shows on dashboards"""
    for d in details:
        loan_status_counter.labels(status=d.status.value).inc()
