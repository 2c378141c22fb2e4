"""GET /v1/admin/companies/pricing-warnings - companies with pricing gaps"""

from fastapi import APIRouter, Depends
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from optioil_gateway.api.v1.schemas import (
    CompanyWarningSchema,
    CompanyWarningsSchema,
    PricingWarningsResponse,
    WarningCountSchema,
    WarningSummarySchema,
)
from optioil_gateway.api.dependencies import get_current_actor
from optioil_gateway.config import settings
from optioil_gateway.domain.models import Actor
from optioil_gateway.domain.pricing_warnings import (
    CompanyPricing,
    ProductPricing,
    build_pricing_warnings,
    summarize_warnings,
)
from optioil_gateway.infrastructure.database.repositories import CompanyProductRepository
from optioil_gateway.infrastructure.database.session import get_db
from optioil_gateway.utils.date_utils import ensure_utc, utc_now

router = APIRouter()


def _count(count: int) -> WarningCountSchema:
    return WarningCountSchema(count=count, has_warning=count > 0)


@router.get("/admin/companies/pricing-warnings", response_model=PricingWarningsResponse)
def get_pricing_warnings(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """
    List companies whose enabled products lack a price or quotation expiry,
    or whose quotations run out soon without a pending price schedule.
    """
    companies = [
        CompanyPricing(
            company_id=company.id,
            company_name=company.name,
            products=[
                ProductPricing(
                    company_product_id=cp.id,
                    price=cp.price,
                    quotation_expiry_date=ensure_utc(cp.quotation_expiry_date),
                    pending_effective_dates=[
                        ensure_utc(s.effective_date) for s in cp.price_schedules if not s.is_applied
                    ],
                )
                for cp in products
            ],
        )
        for company, products in CompanyProductRepository(db).list_companies_with_pricing()
    ]

    warnings = build_pricing_warnings(companies, utc_now(), settings.quotation_warning_days)
    summary = summarize_warnings(warnings, total_companies=len(companies))

    company_warnings = [
        CompanyWarningSchema(
            company_id=w.company_id,
            company_name=w.company_name,
            warnings=CompanyWarningsSchema(
                unset_price=_count(w.unset_price.count),
                no_products=WarningCountSchema(count=0, has_warning=w.no_products),
                expiring_quotation=_count(w.expiring_quotation.count),
                unset_quotation_expiry=_count(w.unset_quotation_expiry.count),
            ),
            total_warnings=w.total_warnings,
        )
        for w in warnings
    ]

    return PricingWarningsResponse(
        warnings=company_warnings,
        company_warning_map={w.company_id: w for w in company_warnings},
        summary=WarningSummarySchema(
            total_companies_with_warnings=summary["total_companies_with_warnings"],
            total_companies=summary["total_companies"],
            warning_types={to_camel(k): v for k, v in summary["warning_types"].items()},
        ),
    )
