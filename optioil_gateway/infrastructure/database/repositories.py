"""Data access layer for company pricing entities"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload
from optioil_gateway.infrastructure.database.models import (
    AdminOperationLog,
    Company,
    CompanyProduct,
    CompanyProductPriceSchedule,
    ProductMaster,
)
from optioil_gateway.domain.exceptions import DuplicateApplicationError, LedgerEntryNotFoundError
from optioil_gateway.domain.models import AuditEntry, LedgerChange, PriceSchedule
from optioil_gateway.utils.date_utils import ensure_utc


class PriceScheduleRepository:
    """Repository for company product price schedules"""

    def __init__(self, db: Session, lock_rows: bool = False):
        self.db = db
        self.lock_rows = lock_rows

    def find_due_unapplied(self, now: datetime) -> List[PriceSchedule]:
        """
        Fetch unapplied schedules effective at or before `now`, earliest first.

        Outer joins keep schedules whose company product has disappeared so the
        batch can report them instead of silently skipping them. With lock_rows
        the schedule rows are locked and rows locked by a concurrent run are
        skipped (ignored by backends without FOR UPDATE, such as SQLite).
        """
        query = (
            self.db.query(CompanyProductPriceSchedule, Company.name, ProductMaster.name)
            .outerjoin(CompanyProduct, CompanyProductPriceSchedule.company_product_id == CompanyProduct.id)
            .outerjoin(Company, CompanyProduct.company_id == Company.id)
            .outerjoin(ProductMaster, CompanyProduct.product_master_id == ProductMaster.id)
            .filter(
                CompanyProductPriceSchedule.effective_date <= ensure_utc(now),
                CompanyProductPriceSchedule.is_applied.is_(False),
            )
            .order_by(CompanyProductPriceSchedule.effective_date.asc(), CompanyProductPriceSchedule.id.asc())
        )
        if self.lock_rows:
            query = query.with_for_update(skip_locked=True, of=CompanyProductPriceSchedule)

        return [
            PriceSchedule(
                id=row.id,
                company_product_id=row.company_product_id,
                scheduled_price=row.scheduled_price,
                effective_date=ensure_utc(row.effective_date),
                expiry_date=ensure_utc(row.expiry_date),
                is_applied=row.is_applied,
                company_name=company_name,
                product_name=product_name,
            )
            for row, company_name, product_name in query.all()
        ]

    def mark_applied(self, schedule_id: int) -> None:
        """Compare-and-set is_applied False -> True; losing the race raises"""
        updated = (
            self.db.query(CompanyProductPriceSchedule)
            .filter(
                CompanyProductPriceSchedule.id == schedule_id,
                CompanyProductPriceSchedule.is_applied.is_(False),
            )
            .update({CompanyProductPriceSchedule.is_applied: True}, synchronize_session=False)
        )
        if updated != 1:
            raise DuplicateApplicationError(schedule_id)

    def list_for_company(self, company_id: int) -> List[CompanyProductPriceSchedule]:
        """All schedules of a company's products, earliest first"""
        return (
            self.db.query(CompanyProductPriceSchedule)
            .join(CompanyProduct, CompanyProductPriceSchedule.company_product_id == CompanyProduct.id)
            .options(selectinload(CompanyProductPriceSchedule.company_product).selectinload(CompanyProduct.product_master))
            .filter(CompanyProduct.company_id == company_id)
            .order_by(CompanyProductPriceSchedule.effective_date.asc(), CompanyProductPriceSchedule.id.asc())
            .all()
        )

    def get_unapplied_for_company(self, schedule_id: int, company_id: int) -> Optional[CompanyProductPriceSchedule]:
        """
        Fetch a schedule that is still editable (unapplied) and owned by the company.

        The row is locked so a concurrent batch cannot apply it mid-edit.
        """
        return (
            self.db.query(CompanyProductPriceSchedule)
            .join(CompanyProduct, CompanyProductPriceSchedule.company_product_id == CompanyProduct.id)
            .filter(
                CompanyProductPriceSchedule.id == schedule_id,
                CompanyProduct.company_id == company_id,
                CompanyProductPriceSchedule.is_applied.is_(False),
            )
            .with_for_update(of=CompanyProductPriceSchedule)
            .first()
        )

    def find_unapplied_on_date(
        self, company_product_id: int, effective_date: datetime
    ) -> Optional[CompanyProductPriceSchedule]:
        return (
            self.db.query(CompanyProductPriceSchedule)
            .filter(
                CompanyProductPriceSchedule.company_product_id == company_product_id,
                CompanyProductPriceSchedule.effective_date == ensure_utc(effective_date),
                CompanyProductPriceSchedule.is_applied.is_(False),
            )
            .first()
        )

    def create_schedule(
        self,
        company_product_id: int,
        scheduled_price: Decimal,
        effective_date: datetime,
        expiry_date: Optional[datetime],
    ) -> CompanyProductPriceSchedule:
        """Persist a new unapplied schedule"""
        db_schedule = CompanyProductPriceSchedule(
            company_product_id=company_product_id,
            scheduled_price=scheduled_price,
            effective_date=ensure_utc(effective_date),
            expiry_date=ensure_utc(expiry_date),
            is_applied=False,
        )
        self.db.add(db_schedule)
        self.db.flush()  # Get ID without committing
        return db_schedule

    def delete_schedule(self, db_schedule: CompanyProductPriceSchedule) -> None:
        self.db.delete(db_schedule)
        self.db.flush()


class CompanyProductRepository:
    """Repository for the live company product prices"""

    def __init__(self, db: Session, lock_rows: bool = False):
        self.db = db
        self.lock_rows = lock_rows

    def update_price_and_expiry(
        self,
        company_product_id: int,
        price: Decimal,
        expiry_date: Optional[datetime],
    ) -> LedgerChange:
        """
        Overwrite the live price; overwrite the quotation expiry only when one is given.

        Raises:
            LedgerEntryNotFoundError: no company product with this id
        """
        db_product = self.db.get(CompanyProduct, company_product_id, with_for_update=True if self.lock_rows else None)
        if db_product is None:
            raise LedgerEntryNotFoundError(company_product_id)

        change = LedgerChange(
            company_product_id=company_product_id,
            old_price=db_product.price,
            new_price=price,
            old_expiry_date=ensure_utc(db_product.quotation_expiry_date),
            new_expiry_date=ensure_utc(db_product.quotation_expiry_date),
        )

        db_product.price = price
        if expiry_date is not None:
            db_product.quotation_expiry_date = ensure_utc(expiry_date)
            change.new_expiry_date = ensure_utc(expiry_date)

        self.db.flush()
        return change

    def get_for_company(self, company_product_id: int, company_id: int) -> Optional[CompanyProduct]:
        """Fetch a company product only if it belongs to the company"""
        return (
            self.db.query(CompanyProduct)
            .filter(CompanyProduct.id == company_product_id, CompanyProduct.company_id == company_id)
            .first()
        )

    def list_companies_with_pricing(self) -> List[Tuple[Company, List[CompanyProduct]]]:
        """Every company with its enabled products and their unapplied schedules"""
        companies = (
            self.db.query(Company)
            .options(selectinload(Company.company_products).selectinload(CompanyProduct.price_schedules))
            .order_by(Company.id.asc())
            .all()
        )
        return [(company, [cp for cp in company.company_products if cp.enabled]) for company in companies]


class AuditLogRepository:
    """Repository for the append-only admin operation log"""

    def __init__(self, db: Session):
        self.db = db

    def append(self, entry: AuditEntry) -> AdminOperationLog:
        """Persist one audit entry"""
        db_entry = AdminOperationLog(
            admin_id=entry.actor_id,
            action=entry.action,
            target_type=entry.target_type,
            target_id=entry.target_id,
            details=entry.details,
        )
        self.db.add(db_entry)
        self.db.flush()
        return db_entry
