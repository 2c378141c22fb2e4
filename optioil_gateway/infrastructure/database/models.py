"""SQLAlchemy ORM models for companies, their product pricing, and the admin audit log"""

from sqlalchemy import (
    Column,
    Integer,
    Boolean,
    Numeric,
    DateTime,
    ForeignKey,
    Text,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Company(Base):
    """Customer company (tenant)"""

    __tablename__ = "company"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    company_products = relationship("CompanyProduct", back_populates="company", cascade="all, delete-orphan")


class ProductMaster(Base):
    """Catalog product shared by all companies"""

    __tablename__ = "product_master"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CompanyProduct(Base):
    """Live price and quotation expiry of one product for one company"""

    __tablename__ = "company_product"
    __table_args__ = (
        UniqueConstraint("company_id", "product_master_id", name="uq_company_product"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("company.id", ondelete="CASCADE"), nullable=False, index=True)
    product_master_id = Column(Integer, ForeignKey("product_master.id", ondelete="CASCADE"), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    price = Column(Numeric(12, 2), nullable=True)  # NULL = price not set
    quotation_expiry_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    company = relationship("Company", back_populates="company_products")
    product_master = relationship("ProductMaster")
    price_schedules = relationship(
        "CompanyProductPriceSchedule",
        back_populates="company_product",
        cascade="all, delete-orphan",
    )


class CompanyProductPriceSchedule(Base):
    """Future price change; is_applied only ever goes from False to True"""

    __tablename__ = "company_product_price_schedule"
    __table_args__ = (
        Index("ix_price_schedule_due", "is_applied", "effective_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_product_id = Column(
        Integer,
        ForeignKey("company_product.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scheduled_price = Column(Numeric(12, 2), nullable=False)
    effective_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=True)
    is_applied = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    company_product = relationship("CompanyProduct", back_populates="price_schedules")


class AdminOperationLog(Base):
    """Append-only audit trail of administrative operations"""

    __tablename__ = "admin_operation_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(Integer, nullable=False, index=True)  # 0 = system scheduler
    action = Column(Text, nullable=False)
    target_type = Column(Text, nullable=False)
    target_id = Column(Integer, nullable=False)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
