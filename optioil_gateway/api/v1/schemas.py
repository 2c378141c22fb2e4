"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized with camelCase keys; accepts either case on input"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BatchRequest(CamelModel):
    """Request body for POST /v1/admin/batch/price-schedules"""

    action: str = Field(..., min_length=1, description="Batch action, e.g. apply_schedules")


class BatchResultSchema(CamelModel):
    """Outcome of one schedule in a batch run"""

    success: bool
    schedule_id: int
    company_name: Optional[str] = None
    product_name: Optional[str] = None
    new_price: Optional[Decimal] = None
    effective_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    error: Optional[str] = None


class BatchResponse(CamelModel):
    """Response for a completed apply_schedules run"""

    success: Literal[True] = True
    message: str
    applied_count: int
    failed_count: int
    details: List[BatchResultSchema]


class ScheduleCreateRequest(CamelModel):
    """Request body for creating a price schedule"""

    company_product_id: int = Field(..., gt=0)
    # Column is Numeric(12, 2): more precision would be rounded, more digits overflow
    scheduled_price: Decimal = Field(..., max_digits=12, decimal_places=2, description="New price; must be positive")
    effective_date: datetime
    expiry_date: Optional[datetime] = None


class ScheduleUpdateRequest(CamelModel):
    """Request body for editing an unapplied schedule; omitted fields stay unchanged"""

    scheduled_price: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2)
    effective_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None  # explicit null clears the expiry


class ScheduleSchema(CamelModel):
    """Single price schedule"""

    id: int
    company_product_id: int
    scheduled_price: Decimal
    effective_date: datetime
    expiry_date: Optional[datetime] = None
    is_applied: bool
    created_at: Optional[datetime] = None
    product_name: str
    product_code: str


class WarningCountSchema(CamelModel):
    count: int
    has_warning: bool


class CompanyWarningsSchema(CamelModel):
    unset_price: WarningCountSchema
    no_products: WarningCountSchema
    expiring_quotation: WarningCountSchema
    unset_quotation_expiry: WarningCountSchema


class CompanyWarningSchema(CamelModel):
    """Pricing warnings of one company"""

    company_id: int
    company_name: str
    warnings: CompanyWarningsSchema
    total_warnings: int


class WarningSummarySchema(CamelModel):
    total_companies_with_warnings: int
    total_companies: int
    warning_types: Dict[str, int]


class PricingWarningsResponse(CamelModel):
    """Response for GET /v1/admin/companies/pricing-warnings"""

    warnings: List[CompanyWarningSchema]
    summary: WarningSummarySchema
    company_warning_map: Dict[int, CompanyWarningSchema]  # same entries keyed by company id
