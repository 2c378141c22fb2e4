"""Transaction-scoped unit of work over one SQLAlchemy session"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from optioil_gateway.domain.exceptions import ItemValidationError
from optioil_gateway.infrastructure.database.repositories import (
    AuditLogRepository,
    CompanyProductRepository,
    PriceScheduleRepository,
)


class SqlAlchemyUnitOfWork:
    """
    Groups the pricing repositories under the transaction of one session.

    The session is owned by the caller (request scope or script); the unit of
    work only commits, rolls back, and opens savepoints on it.
    """

    def __init__(self, db: Session, lock_rows: bool = False):
        self.db = db
        self.schedules = PriceScheduleRepository(db, lock_rows=lock_rows)
        self.ledger = CompanyProductRepository(db, lock_rows=lock_rows)
        self.audit = AuditLogRepository(db)

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            return
        # A failed rollback must not mask the exception that ended the block
        try:
            self.rollback()
        except SQLAlchemyError as e:
            logging.error(f"Rollback after failed unit of work also failed: {e}")

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        """
        SAVEPOINT around one item; constraint violations become ItemValidationError.

        Any exception rolls back to the savepoint and is re-raised, leaving the
        outer transaction usable for the next item.
        """
        try:
            with self.db.begin_nested():
                yield
                self.db.flush()
        except IntegrityError as e:
            raise ItemValidationError(f"Constraint violation: {e.orig}") from e

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
