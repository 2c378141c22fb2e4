"""/v1/admin/companies/{company_id}/price-schedules - manage a company's future prices"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from optioil_gateway.api.v1.schemas import ScheduleCreateRequest, ScheduleSchema, ScheduleUpdateRequest
from optioil_gateway.api.dependencies import get_current_actor
from optioil_gateway.domain.exceptions import InvalidScheduleError, ScheduleConflictError, ScheduleNotFoundError
from optioil_gateway.domain.models import Actor, AuditEntry, CREATE_PRICE_SCHEDULE, DELETE_PRICE_SCHEDULE
from optioil_gateway.domain.schedule_rules import check_effective_date, check_expiry_date, check_price
from optioil_gateway.infrastructure.database.models import CompanyProductPriceSchedule
from optioil_gateway.infrastructure.database.repositories import (
    AuditLogRepository,
    CompanyProductRepository,
    PriceScheduleRepository,
)
from optioil_gateway.infrastructure.database.session import get_db
from optioil_gateway.utils.date_utils import ensure_utc, utc_now

router = APIRouter()

SCHEDULE_TARGET = "CompanyProductPriceSchedule"


def _to_schema(schedule: CompanyProductPriceSchedule) -> ScheduleSchema:
    product = schedule.company_product.product_master
    return ScheduleSchema(
        id=schedule.id,
        company_product_id=schedule.company_product_id,
        scheduled_price=schedule.scheduled_price,
        effective_date=ensure_utc(schedule.effective_date),
        expiry_date=ensure_utc(schedule.expiry_date),
        is_applied=schedule.is_applied,
        created_at=ensure_utc(schedule.created_at),
        product_name=product.name,
        product_code=product.code,
    )


@router.get("/admin/companies/{company_id}/price-schedules", response_model=Dict[int, List[ScheduleSchema]])
def list_price_schedules(
    company_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    Retrieve every schedule (applied or not) of a company.

    Returns:
        Schedules grouped by company product id, earliest effective date first
    """
    grouped: Dict[int, List[ScheduleSchema]] = {}
    for schedule in PriceScheduleRepository(db).list_for_company(company_id):
        grouped.setdefault(schedule.company_product_id, []).append(_to_schema(schedule))
    return grouped


@router.post("/admin/companies/{company_id}/price-schedules", response_model=ScheduleSchema, status_code=201)
def create_price_schedule(
    company_id: int,
    request_body: ScheduleCreateRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Schedule a future price (and optional quotation expiry) for one company product"""
    effective_date = ensure_utc(request_body.effective_date)
    expiry_date = ensure_utc(request_body.expiry_date)

    try:
        check_price(request_body.scheduled_price)
        check_effective_date(effective_date, utc_now())
        check_expiry_date(expiry_date, effective_date)

        company_product = CompanyProductRepository(db).get_for_company(request_body.company_product_id, company_id)
        if company_product is None:
            raise HTTPException(status_code=404, detail="Company product not found")

        schedule_repo = PriceScheduleRepository(db)
        if schedule_repo.find_unapplied_on_date(company_product.id, effective_date) is not None:
            raise ScheduleConflictError("Schedule already exists for this date")

        schedule = schedule_repo.create_schedule(
            company_product_id=company_product.id,
            scheduled_price=request_body.scheduled_price,
            effective_date=effective_date,
            expiry_date=expiry_date,
        )
        AuditLogRepository(db).append(
            AuditEntry(
                actor_id=actor.id,
                action=CREATE_PRICE_SCHEDULE,
                target_type=SCHEDULE_TARGET,
                target_id=schedule.id,
                details=(
                    f"Company: {company_id}, Product: {company_product.product_master.name}, "
                    f"Price: {request_body.scheduled_price}, Date: {effective_date.isoformat()}"
                ),
            )
        )
        db.commit()

    except InvalidScheduleError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    except ScheduleConflictError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    return _to_schema(schedule)


@router.put("/admin/companies/{company_id}/price-schedules/{schedule_id}", response_model=ScheduleSchema)
def update_price_schedule(
    company_id: int,
    schedule_id: int,
    request_body: ScheduleUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Edit an unapplied schedule; applied schedules are immutable"""
    schedule_repo = PriceScheduleRepository(db)

    try:
        schedule = schedule_repo.get_unapplied_for_company(schedule_id, company_id)
        if schedule is None:
            raise ScheduleNotFoundError("Schedule not found or already applied")

        if request_body.scheduled_price is not None:
            check_price(request_body.scheduled_price)
            schedule.scheduled_price = request_body.scheduled_price

        effective_date = ensure_utc(schedule.effective_date)
        if request_body.effective_date is not None:
            effective_date = ensure_utc(request_body.effective_date)
            check_effective_date(effective_date, utc_now())
            existing = schedule_repo.find_unapplied_on_date(schedule.company_product_id, effective_date)
            if existing is not None and existing.id != schedule.id:
                raise ScheduleConflictError("Schedule already exists for this date")
            schedule.effective_date = effective_date

        expiry_date = ensure_utc(schedule.expiry_date)
        if "expiry_date" in request_body.model_fields_set:
            expiry_date = ensure_utc(request_body.expiry_date)
        check_expiry_date(expiry_date, effective_date)
        schedule.expiry_date = expiry_date

        db.commit()

    except ScheduleNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidScheduleError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    except ScheduleConflictError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    logging.info(
        "Price schedule updated",
        extra={"schedule_id": schedule_id, "company_id": company_id, "actor_id": actor.id},
    )
    return _to_schema(schedule)


@router.delete("/admin/companies/{company_id}/price-schedules/{schedule_id}")
def delete_price_schedule(
    company_id: int,
    schedule_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Remove an unapplied schedule"""
    schedule_repo = PriceScheduleRepository(db)
    schedule = schedule_repo.get_unapplied_for_company(schedule_id, company_id)
    if schedule is None:
        raise HTTPException(status_code=404, detail="Schedule not found or already applied")

    schedule_repo.delete_schedule(schedule)
    AuditLogRepository(db).append(
        AuditEntry(
            actor_id=actor.id,
            action=DELETE_PRICE_SCHEDULE,
            target_type=SCHEDULE_TARGET,
            target_id=schedule_id,
            details=f"Company: {company_id}, Schedule ID: {schedule_id}",
        )
    )
    db.commit()

    return {"success": True}
