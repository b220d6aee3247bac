"""Store diagnostics: records the engine cannot attribute to any cycle"""

import time
from fastapi import APIRouter, Depends, Request

from rosca_ledger.api.v1.schemas import OrphanReportResponse
from rosca_ledger.api.dependencies import get_ledger_repository, get_request_id
from rosca_ledger.infrastructure.database.repositories import LedgerRepository
from rosca_ledger.infrastructure.observability.metrics import record_computation
from rosca_ledger.infrastructure.observability.logging import log_computation

router = APIRouter()


@router.get("/diagnostics/orphans", response_model=OrphanReportResponse)
def get_orphaned_records(
    request: Request,
    repo: LedgerRepository = Depends(get_ledger_repository),
):
    """
    Count savings, loans, payments and loss events whose cycle does not exist.

    Such records contribute nothing to any figure; a non-empty report is
    also logged at WARNING by the repository.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    orphans = repo.find_orphaned_records()

    record_computation("orphans")
    log_computation(request_id, None, "orphans", (time.time() - start_time) * 1000)

    return OrphanReportResponse(clean=not orphans, orphans=orphans)
