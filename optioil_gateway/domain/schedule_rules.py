"""Rules for creating and editing price schedules before they are applied"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from optioil_gateway.domain.exceptions import InvalidScheduleError


def check_price(price: Decimal) -> None:
    if price <= 0:
        raise InvalidScheduleError("Invalid price value")


def check_effective_date(effective_date: datetime, now: datetime) -> None:
    if effective_date <= now:
        raise InvalidScheduleError("Effective date must be in the future")


def check_expiry_date(expiry_date: Optional[datetime], effective_date: datetime) -> None:
    """An expiry date is optional, but when present must come after the effective date"""
    if expiry_date is not None and expiry_date <= effective_date:
        raise InvalidScheduleError("Expiry date must be after effective date")
