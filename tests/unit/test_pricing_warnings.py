"""Unit tests for company pricing warnings"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from optioil_gateway.domain.pricing_warnings import (
    CompanyPricing,
    ProductPricing,
    build_pricing_warnings,
    summarize_warnings,
)

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)
FAR_EXPIRY = NOW + timedelta(days=180)


def _product(product_id, price="100.00", expiry=FAR_EXPIRY, pending=None):
    return ProductPricing(
        company_product_id=product_id,
        price=Decimal(price) if price is not None else None,
        quotation_expiry_date=expiry,
        pending_effective_dates=pending or [],
    )


def test_healthy_company_has_no_warnings():
    """Test companies with priced products and distant expiries are omitted"""
    companies = [CompanyPricing(1, "Acme Lubricants", [_product(1), _product(2)])]

    assert build_pricing_warnings(companies, NOW) == []


def test_unset_price_and_expiry_are_counted():
    """Test per-product counts for missing price and missing quotation expiry"""
    companies = [
        CompanyPricing(
            1,
            "Acme Lubricants",
            [_product(1, price=None), _product(2, price=None, expiry=None), _product(3)],
        )
    ]

    warnings = build_pricing_warnings(companies, NOW)

    assert len(warnings) == 1
    warning = warnings[0]
    assert warning.unset_price.count == 2
    assert warning.unset_quotation_expiry.count == 1
    assert warning.expiring_quotation.has_warning is False
    assert warning.total_warnings == 2


def test_company_without_products():
    """Test a company with no enabled products raises the no_products warning"""
    warnings = build_pricing_warnings([CompanyPricing(2, "Borealis Logistics")], NOW)

    assert warnings[0].no_products is True
    assert warnings[0].total_warnings == 1


def test_expiring_quotation_within_window():
    """Test quotations expiring inside the window warn unless a schedule is pending"""
    soon = NOW + timedelta(days=10)
    companies = [
        CompanyPricing(
            1,
            "Acme Lubricants",
            [
                _product(1, expiry=soon),
                _product(2, expiry=soon, pending=[NOW + timedelta(days=5)]),
                _product(3, expiry=NOW + timedelta(days=31)),
                _product(4, expiry=NOW - timedelta(days=1)),
            ],
        )
    ]

    warnings = build_pricing_warnings(companies, NOW)

    assert warnings[0].expiring_quotation.count == 1


def test_window_is_configurable():
    companies = [CompanyPricing(1, "Acme Lubricants", [_product(1, expiry=NOW + timedelta(days=40))])]

    assert build_pricing_warnings(companies, NOW, window_days=30) == []
    assert build_pricing_warnings(companies, NOW, window_days=45)[0].expiring_quotation.count == 1


def test_summarize_warnings():
    """Test the summary counts companies per warning type"""
    companies = [
        CompanyPricing(1, "Acme Lubricants", [_product(1, price=None)]),
        CompanyPricing(2, "Borealis Logistics"),
        CompanyPricing(3, "Cobalt Marine", [_product(3)]),
    ]
    warnings = build_pricing_warnings(companies, NOW)

    summary = summarize_warnings(warnings, total_companies=len(companies))

    assert summary["total_companies_with_warnings"] == 2
    assert summary["total_companies"] == 3
    assert summary["warning_types"] == {
        "unset_price": 1,
        "no_products": 1,
        "expiring_quotation": 0,
        "unset_quotation_expiry": 0,
    }
