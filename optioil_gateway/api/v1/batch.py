"""POST /v1/admin/batch/price-schedules - scheduled price batch endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from optioil_gateway.api.v1.schemas import BatchRequest, BatchResponse, BatchResultSchema
from optioil_gateway.api.dependencies import get_current_actor, get_request_id, get_unit_of_work
from optioil_gateway.config import settings
from optioil_gateway.domain.models import Actor
from optioil_gateway.domain.pricing import apply_due_schedules
from optioil_gateway.domain.exceptions import SelectionError, TransactionAbortError
from optioil_gateway.infrastructure.database.unit_of_work import SqlAlchemyUnitOfWork
from optioil_gateway.infrastructure.observability.metrics import record_batch, record_batch_failure
from optioil_gateway.infrastructure.observability.logging import log_batch_run
from optioil_gateway.utils.date_utils import utc_now

router = APIRouter()

APPLY_SCHEDULES = "apply_schedules"


def _batch_failed(error: Exception) -> HTTPException:
    detail = "Batch processing failed"
    if settings.is_development:
        detail = f"{detail}: {error}"
    return HTTPException(status_code=500, detail=detail)


@router.post("/admin/batch/price-schedules", response_model=BatchResponse)
def run_batch(
    request_body: BatchRequest,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
):
    """
    Run an administrative batch action.

    apply_schedules:
    1. Select every unapplied schedule whose effective date has passed
    2. Apply them to company product prices in one transaction
    3. Return applied/failed counts with per-schedule details

    Safe to retry: schedules applied by an earlier run are never selected again.
    """
    if request_body.action != APPLY_SCHEDULES:
        raise HTTPException(status_code=400, detail="Invalid action")

    start_time = time.time()
    request_id = get_request_id(request)

    try:
        summary = apply_due_schedules(uow, now=utc_now(), actor_id=actor.id)

    except (SelectionError, TransactionAbortError) as e:
        record_batch_failure()
        logging.error(f"Batch processing error: {e}", extra={"request_id": request_id, "actor_id": actor.id})
        raise _batch_failed(e)

    duration = time.time() - start_time
    record_batch(summary, duration)
    log_batch_run(request_id, actor.id, summary.applied_count, summary.failed_count, duration * 1000)

    return BatchResponse(
        message=summary.message,
        applied_count=summary.applied_count,
        failed_count=summary.failed_count,
        details=[
            BatchResultSchema(
                success=r.success,
                schedule_id=r.schedule_id,
                company_name=r.company_name,
                product_name=r.product_name,
                new_price=r.new_price,
                effective_date=r.effective_date,
                expiry_date=r.expiry_date,
                error=r.error,
            )
            for r in summary.results
        ],
    )
