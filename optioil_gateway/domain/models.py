"""Domain models - pure Python dataclasses representing pricing entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

APPLY_SCHEDULED_PRICE = "APPLY_SCHEDULED_PRICE"
CREATE_PRICE_SCHEDULE = "CREATE_PRICE_SCHEDULE"
DELETE_PRICE_SCHEDULE = "DELETE_PRICE_SCHEDULE"

SYSTEM_SCHEDULER_ID = 0


@dataclass
class PriceSchedule:
    """Pending price change for one company product"""

    id: int
    company_product_id: int
    scheduled_price: Decimal
    effective_date: datetime
    expiry_date: Optional[datetime] = None
    is_applied: bool = False
    company_name: Optional[str] = None
    product_name: Optional[str] = None


@dataclass
class LedgerChange:
    """Price and quotation expiry of a company product before and after an update"""

    company_product_id: int
    old_price: Optional[Decimal]
    new_price: Decimal
    old_expiry_date: Optional[datetime]
    new_expiry_date: Optional[datetime]


@dataclass
class AuditEntry:
    """Administrative operation to append to the audit trail"""

    actor_id: int
    action: str
    target_type: str
    target_id: int
    details: str


@dataclass
class Actor:
    """Authenticated caller of an administrative operation"""

    id: int
    username: str


@dataclass
class BatchResult:
    """Outcome of applying one schedule"""

    success: bool
    schedule_id: int
    company_name: Optional[str] = None
    product_name: Optional[str] = None
    new_price: Optional[Decimal] = None
    effective_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    error: Optional[str] = None


@dataclass
class BatchSummary:
    """Outcome of one apply_due_schedules invocation, in processing order"""

    results: List[BatchResult] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def message(self) -> str:
        if not self.results:
            return "No schedules to apply"
        return f"Applied {self.applied_count} scheduled prices"
