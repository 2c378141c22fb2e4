"""Persistence contracts consumed by the scheduled price applier.

Implementations live in infrastructure (SQLAlchemy) and in the test suite
(in-memory). All calls made through one unit of work share its transaction.
"""

from datetime import datetime
from decimal import Decimal
from typing import ContextManager, List, Optional, Protocol

from optioil_gateway.domain.models import AuditEntry, LedgerChange, PriceSchedule


class PriceScheduleStore(Protocol):
    def find_due_unapplied(self, now: datetime) -> List[PriceSchedule]:
        """Unapplied schedules with effective_date <= now, earliest first"""
        ...

    def mark_applied(self, schedule_id: int) -> None:
        """Flip is_applied to True; raise DuplicateApplicationError if already set"""
        ...


class CompanyProductLedger(Protocol):
    def update_price_and_expiry(
        self,
        company_product_id: int,
        price: Decimal,
        expiry_date: Optional[datetime],
    ) -> LedgerChange:
        """Overwrite price; overwrite quotation expiry only when expiry_date is given"""
        ...


class AuditLogSink(Protocol):
    def append(self, entry: AuditEntry) -> None:
        ...


class PricingUnitOfWork(Protocol):
    schedules: PriceScheduleStore
    ledger: CompanyProductLedger
    audit: AuditLogSink

    def __enter__(self) -> "PricingUnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def savepoint(self) -> ContextManager[None]:
        """Writes inside the block are discarded if it raises"""
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
