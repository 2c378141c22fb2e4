"""Pricing health checks shown on the admin dashboard"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from optioil_gateway.utils.date_utils import add_days


@dataclass
class ProductPricing:
    """Pricing state of one enabled company product"""

    company_product_id: int
    price: Optional[Decimal]
    quotation_expiry_date: Optional[datetime]
    pending_effective_dates: List[datetime] = field(default_factory=list)


@dataclass
class CompanyPricing:
    company_id: int
    company_name: str
    products: List[ProductPricing] = field(default_factory=list)


@dataclass
class WarningCount:
    count: int = 0

    @property
    def has_warning(self) -> bool:
        return self.count > 0


@dataclass
class CompanyWarning:
    """Pricing problems of one company; each attribute is one warning type"""

    company_id: int
    company_name: str
    unset_price: WarningCount = field(default_factory=WarningCount)
    no_products: bool = False
    expiring_quotation: WarningCount = field(default_factory=WarningCount)
    unset_quotation_expiry: WarningCount = field(default_factory=WarningCount)

    @property
    def total_warnings(self) -> int:
        return sum(
            [
                self.unset_price.has_warning,
                self.no_products,
                self.expiring_quotation.has_warning,
                self.unset_quotation_expiry.has_warning,
            ]
        )


def _expires_without_schedule(product: ProductPricing, now: datetime, window_end: datetime) -> bool:
    """Quotation runs out inside the window and no pending schedule takes over before then"""
    expiry = product.quotation_expiry_date
    if expiry is None or not (now <= expiry <= window_end):
        return False
    return not any(now <= d <= window_end for d in product.pending_effective_dates)


def build_pricing_warnings(
    companies: List[CompanyPricing],
    now: datetime,
    window_days: int = 30,
) -> List[CompanyWarning]:
    """
    Evaluate every company and return only those with at least one warning.

    Warning types:
    - unset_price: enabled products without a price
    - no_products: company has no enabled products
    - expiring_quotation: quotation expires within window_days and no
      unapplied schedule becomes effective in that window
    - unset_quotation_expiry: enabled products without a quotation expiry
    """
    window_end = add_days(now, window_days)
    warnings = []

    for company in companies:
        warning = CompanyWarning(company_id=company.company_id, company_name=company.company_name)
        warning.no_products = not company.products
        warning.unset_price.count = sum(1 for p in company.products if p.price is None)
        warning.unset_quotation_expiry.count = sum(
            1 for p in company.products if p.quotation_expiry_date is None
        )
        warning.expiring_quotation.count = sum(
            1 for p in company.products if _expires_without_schedule(p, now, window_end)
        )

        if warning.total_warnings > 0:
            warnings.append(warning)

    return warnings


def summarize_warnings(warnings: List[CompanyWarning], total_companies: int) -> Dict[str, object]:
    """Counts of companies per warning type"""
    return {
        "total_companies_with_warnings": len(warnings),
        "total_companies": total_companies,
        "warning_types": {
            "unset_price": sum(1 for w in warnings if w.unset_price.has_warning),
            "no_products": sum(1 for w in warnings if w.no_products),
            "expiring_quotation": sum(1 for w in warnings if w.expiring_quotation.has_warning),
            "unset_quotation_expiry": sum(1 for w in warnings if w.unset_quotation_expiry.has_warning),
        },
    }
