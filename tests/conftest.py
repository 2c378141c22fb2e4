"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from optioil_gateway.api.main import create_app
from optioil_gateway.config import settings
from optioil_gateway.infrastructure.database.models import (
    Base,
    Company,
    CompanyProduct,
    CompanyProductPriceSchedule,
    ProductMaster,
)
from optioil_gateway.infrastructure.database.session import create_db_engine, get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_db_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SCHEDULER_TOKEN = "test-scheduler-secret"
ADMIN_TOKEN = "test-admin-token"
ADMIN_ID = 7


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """Create FastAPI test client with test database and known caller tokens"""
    monkeypatch.setattr(settings, "scheduler_secret", SCHEDULER_TOKEN)
    monkeypatch.setattr(settings, "admin_tokens", {ADMIN_TOKEN: ADMIN_ID})

    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def scheduler_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {SCHEDULER_TOKEN}"}


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def pricing_data(db: Session) -> Dict[str, int]:
    """
    Two companies sharing the product catalog:
    - Acme: hydraulic oil priced 1000.00 (quotation until 2026-06-30), gear oil unpriced
    - Borealis: hydraulic oil priced 950.00
    """
    acme = Company(name="Acme Lubricants")
    borealis = Company(name="Borealis Logistics")
    hydraulic = ProductMaster(code="HO-46", name="Hydraulic Oil 46")
    gear = ProductMaster(code="GO-220", name="Gear Oil 220")
    db.add_all([acme, borealis, hydraulic, gear])
    db.flush()

    acme_hydraulic = CompanyProduct(
        company_id=acme.id,
        product_master_id=hydraulic.id,
        price=Decimal("1000.00"),
        quotation_expiry_date=datetime(2026, 6, 30, tzinfo=timezone.utc),
    )
    acme_gear = CompanyProduct(company_id=acme.id, product_master_id=gear.id, price=None)
    borealis_hydraulic = CompanyProduct(
        company_id=borealis.id,
        product_master_id=hydraulic.id,
        price=Decimal("950.00"),
    )
    db.add_all([acme_hydraulic, acme_gear, borealis_hydraulic])
    db.flush()

    ids = {
        "acme_id": acme.id,
        "borealis_id": borealis.id,
        "acme_hydraulic_id": acme_hydraulic.id,
        "acme_gear_id": acme_gear.id,
        "borealis_hydraulic_id": borealis_hydraulic.id,
    }
    db.commit()
    return ids


@pytest.fixture
def make_schedule(db: Session) -> Callable[..., int]:
    """Insert a price schedule row directly and return its id"""

    def _make(
        company_product_id: int,
        price: str,
        effective_date: datetime,
        expiry_date: Optional[datetime] = None,
        is_applied: bool = False,
    ) -> int:
        schedule = CompanyProductPriceSchedule(
            company_product_id=company_product_id,
            scheduled_price=Decimal(price),
            effective_date=effective_date,
            expiry_date=expiry_date,
            is_applied=is_applied,
        )
        db.add(schedule)
        db.flush()
        schedule_id = schedule.id
        db.commit()
        return schedule_id

    return _make
