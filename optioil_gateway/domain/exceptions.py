"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class SelectionError(DomainException):
    """Reading the due price schedules failed; nothing was processed"""

    pass


class TransactionAbortError(DomainException):
    """The batch transaction could not complete; every change was rolled back"""

    pass


class ItemValidationError(DomainException):
    """A single schedule cannot be applied; the batch continues without it"""

    pass


class LedgerEntryNotFoundError(ItemValidationError):
    """The company product targeted by a schedule does not exist"""

    def __init__(self, company_product_id: int):
        super().__init__(f"Company product {company_product_id} not found")
        self.company_product_id = company_product_id


class InvalidScheduleError(ItemValidationError):
    """Schedule values fail a sanity check (price, dates)"""

    pass


class DuplicateApplicationError(ItemValidationError):
    """Another batch run already applied this schedule"""

    def __init__(self, schedule_id: int):
        super().__init__(f"Schedule {schedule_id} was already applied or removed by another run")
        self.schedule_id = schedule_id


class ScheduleNotFoundError(DomainException):
    """Schedule does not exist, belongs to another company, or is already applied"""

    pass


class ScheduleConflictError(DomainException):
    """An unapplied schedule already exists for the same product and effective date"""

    pass
