"""In-memory pricing store used to test the applier without a database"""

import copy
import pytest
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Set

from optioil_gateway.domain.exceptions import DuplicateApplicationError, LedgerEntryNotFoundError
from optioil_gateway.domain.models import AuditEntry, LedgerChange, PriceSchedule


@dataclass
class LedgerRow:
    company_name: str
    product_name: str
    price: Optional[Decimal] = None
    quotation_expiry_date: Optional[datetime] = None


@dataclass
class PricingState:
    schedules: Dict[int, PriceSchedule] = field(default_factory=dict)
    ledger: Dict[int, LedgerRow] = field(default_factory=dict)
    audit: List[AuditEntry] = field(default_factory=list)


@dataclass
class PendingChanges:
    """Writes of one unit of work, merged into the committed state on commit"""

    ledger_ids: Set[int] = field(default_factory=set)
    applied_ids: Set[int] = field(default_factory=set)
    audit: List[AuditEntry] = field(default_factory=list)


class InMemoryPricingStore:
    """Committed state; units of work read a copy and merge their changes on commit"""

    def __init__(self):
        self.committed = PricingState()

    def add_ledger_entry(self, company_product_id: int, company_name: str, product_name: str,
                         price: Optional[str] = None, quotation_expiry_date: Optional[datetime] = None) -> None:
        self.committed.ledger[company_product_id] = LedgerRow(
            company_name=company_name,
            product_name=product_name,
            price=Decimal(price) if price is not None else None,
            quotation_expiry_date=quotation_expiry_date,
        )

    def add_schedule(self, schedule_id: int, company_product_id: int, price: str,
                     effective_date: datetime, expiry_date: Optional[datetime] = None) -> None:
        self.committed.schedules[schedule_id] = PriceSchedule(
            id=schedule_id,
            company_product_id=company_product_id,
            scheduled_price=Decimal(price),
            effective_date=effective_date,
            expiry_date=expiry_date,
        )


class _Schedules:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self.uow = uow

    def find_due_unapplied(self, now: datetime) -> List[PriceSchedule]:
        if self.uow.fail_on_select:
            raise ConnectionError("pricing store unreachable")
        due = [
            copy.copy(s) for s in self.uow.state.schedules.values()
            if s.effective_date <= now and not s.is_applied
        ]
        for s in due:
            row = self.uow.state.ledger.get(s.company_product_id)
            if row is not None:
                s.company_name, s.product_name = row.company_name, row.product_name
        due.sort(key=lambda s: (s.effective_date, s.id))
        if self.uow.after_select is not None:
            self.uow.after_select()
        return due

    def mark_applied(self, schedule_id: int) -> None:
        # Compare-and-set against the latest committed state, like a row-level update would
        committed = self.uow.store.committed.schedules.get(schedule_id)
        current = self.uow.state.schedules.get(schedule_id)
        if current is None or current.is_applied or (committed is not None and committed.is_applied):
            raise DuplicateApplicationError(schedule_id)
        current.is_applied = True
        self.uow.changes.applied_ids.add(schedule_id)


class _Ledger:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self.uow = uow

    def update_price_and_expiry(self, company_product_id: int, price: Decimal,
                                expiry_date: Optional[datetime]) -> LedgerChange:
        row = self.uow.state.ledger.get(company_product_id)
        if row is None:
            raise LedgerEntryNotFoundError(company_product_id)
        change = LedgerChange(
            company_product_id=company_product_id,
            old_price=row.price,
            new_price=price,
            old_expiry_date=row.quotation_expiry_date,
            new_expiry_date=expiry_date if expiry_date is not None else row.quotation_expiry_date,
        )
        row.price = price
        if expiry_date is not None:
            row.quotation_expiry_date = expiry_date
        self.uow.changes.ledger_ids.add(company_product_id)
        return change


class _Audit:
    def __init__(self, uow: "InMemoryUnitOfWork"):
        self.uow = uow

    def append(self, entry: AuditEntry) -> None:
        if entry.target_id in self.uow.fail_audit_for_targets:
            raise OSError("audit table write failed")
        self.uow.state.audit.append(entry)
        self.uow.changes.audit.append(entry)


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryPricingStore, fail_on_select: bool = False,
                 fail_on_commit: bool = False, fail_on_rollback: bool = False,
                 fail_audit_for_targets: tuple = (),
                 after_select: Optional[Callable[[], None]] = None):
        self.store = store
        self.fail_on_select = fail_on_select
        self.fail_on_commit = fail_on_commit
        self.fail_on_rollback = fail_on_rollback
        self.fail_audit_for_targets = fail_audit_for_targets
        self.after_select = after_select
        self.state: Optional[PricingState] = None
        self.changes = PendingChanges()
        self.schedules = _Schedules(self)
        self.ledger = _Ledger(self)
        self.audit = _Audit(self)

    def __enter__(self) -> "InMemoryUnitOfWork":
        self.state = copy.deepcopy(self.store.committed)
        self.changes = PendingChanges()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            return
        try:
            self.rollback()
        except ConnectionError:
            pass

    @contextmanager
    def savepoint(self):
        backup = copy.deepcopy((self.state, self.changes))
        try:
            yield
        except Exception:
            self.state, self.changes = backup
            raise

    def commit(self) -> None:
        if self.fail_on_commit:
            raise ConnectionError("connection lost during commit")
        # Merge only this unit's writes so a concurrent commit is not overwritten
        merged = copy.deepcopy(self.store.committed)
        for ledger_id in self.changes.ledger_ids:
            merged.ledger[ledger_id] = copy.deepcopy(self.state.ledger[ledger_id])
        for schedule_id in self.changes.applied_ids:
            merged.schedules[schedule_id].is_applied = True
        merged.audit.extend(copy.deepcopy(self.changes.audit))
        self.store.committed = merged
        self.changes = PendingChanges()

    def rollback(self) -> None:
        if self.fail_on_rollback:
            raise ConnectionError("connection lost during rollback")
        self.state = copy.deepcopy(self.store.committed)
        self.changes = PendingChanges()


@pytest.fixture
def store() -> InMemoryPricingStore:
    """Acme with two priced products (ids 1, 2); no schedules yet"""
    store = InMemoryPricingStore()
    store.add_ledger_entry(1, "Acme Lubricants", "Hydraulic Oil 46", price="1000.00")
    store.add_ledger_entry(2, "Acme Lubricants", "Gear Oil 220", price="2000.00")
    return store


@pytest.fixture
def make_uow(store: InMemoryPricingStore) -> Callable[..., InMemoryUnitOfWork]:
    def _make(**kwargs) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(store, **kwargs)

    return _make
