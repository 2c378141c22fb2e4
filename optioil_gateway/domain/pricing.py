"""Scheduled price application - promotes due price schedules into live pricing"""

import logging
from datetime import datetime

from optioil_gateway.domain.exceptions import (
    InvalidScheduleError,
    ItemValidationError,
    SelectionError,
    TransactionAbortError,
)
from optioil_gateway.domain.models import (
    APPLY_SCHEDULED_PRICE,
    AuditEntry,
    BatchResult,
    BatchSummary,
    LedgerChange,
    PriceSchedule,
)
from optioil_gateway.domain.ports import PricingUnitOfWork


def validate_schedule(schedule: PriceSchedule) -> None:
    """
    Sanity-check a schedule before any write is made for it.

    Raises:
        InvalidScheduleError: price is not positive, or the expiry date
            does not come after the effective date
    """
    if schedule.scheduled_price is None or schedule.scheduled_price <= 0:
        raise InvalidScheduleError(
            f"Schedule {schedule.id} has a non-positive price: {schedule.scheduled_price}"
        )
    if schedule.expiry_date is not None and schedule.expiry_date <= schedule.effective_date:
        raise InvalidScheduleError(
            f"Schedule {schedule.id} expiry date must be after its effective date"
        )


def format_audit_details(schedule: PriceSchedule, change: LedgerChange) -> str:
    """Human-readable before/after summary stored with the audit entry"""
    old_price = "unset" if change.old_price is None else str(change.old_price)
    details = (
        f"Auto-applied scheduled price: {old_price} -> {change.new_price} "
        f"for {schedule.product_name} ({schedule.company_name})"
    )
    if schedule.expiry_date is not None:
        details += f" with quotation expiry date: {schedule.expiry_date.isoformat()}"
    return details


def apply_schedule(uow: PricingUnitOfWork, schedule: PriceSchedule, actor_id: int) -> BatchResult:
    """
    Apply one schedule inside its own savepoint.

    ItemValidationError is turned into a failed result with the item's writes
    discarded. Any other exception propagates and aborts the batch.
    """
    try:
        validate_schedule(schedule)

        with uow.savepoint():
            # expiry_date None leaves the stored quotation expiry untouched
            change = uow.ledger.update_price_and_expiry(
                schedule.company_product_id,
                schedule.scheduled_price,
                schedule.expiry_date,
            )
            uow.schedules.mark_applied(schedule.id)
            uow.audit.append(
                AuditEntry(
                    actor_id=actor_id,
                    action=APPLY_SCHEDULED_PRICE,
                    target_type="CompanyProduct",
                    target_id=schedule.company_product_id,
                    details=format_audit_details(schedule, change),
                )
            )

    except ItemValidationError as e:
        logging.warning(
            f"Failed to apply schedule {schedule.id}: {e}",
            extra={"schedule_id": schedule.id, "company_product_id": schedule.company_product_id},
        )
        return BatchResult(success=False, schedule_id=schedule.id, error=str(e))

    return BatchResult(
        success=True,
        schedule_id=schedule.id,
        company_name=schedule.company_name,
        product_name=schedule.product_name,
        new_price=schedule.scheduled_price,
        effective_date=schedule.effective_date,
        expiry_date=schedule.expiry_date,
    )


def apply_due_schedules(uow: PricingUnitOfWork, now: datetime, actor_id: int) -> BatchSummary:
    """
    Main entry point: promote every due, unapplied schedule into the ledger.

    Flow:
    1. Read all schedules with effective_date <= now and is_applied False,
       earliest first (one read, no re-selection during the batch)
    2. For each: update ledger price (and expiry when set), mark applied,
       append audit entry - isolated per item by a savepoint
    3. Commit everything in a single transaction

    When two schedules target the same company product, the later one is
    processed last and its price is what remains on the ledger.

    Raises:
        SelectionError: the due schedules could not be read
        TransactionAbortError: a storage failure outside per-item validation,
            or the final commit, failed; nothing was persisted
    """
    with uow:
        try:
            schedules = uow.schedules.find_due_unapplied(now)
        except Exception as e:
            raise SelectionError(f"Could not read due price schedules: {e}") from e

        summary = BatchSummary()
        try:
            for schedule in schedules:
                summary.results.append(apply_schedule(uow, schedule, actor_id))
            uow.commit()
        except Exception as e:
            try:
                uow.rollback()
            except Exception as rollback_error:
                logging.error(f"Rollback of price schedule batch failed: {rollback_error}")
            raise TransactionAbortError(f"Price schedule batch rolled back: {e}") from e

    return summary
