"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from optioil_gateway.config import settings
from optioil_gateway.domain.models import Actor, SYSTEM_SCHEDULER_ID
from optioil_gateway.infrastructure.database.session import get_db
from optioil_gateway.infrastructure.database.unit_of_work import SqlAlchemyUnitOfWork


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_unit_of_work(db: Session = Depends(get_db)) -> SqlAlchemyUnitOfWork:
    """Provide a pricing unit of work bound to the request's session"""
    return SqlAlchemyUnitOfWork(db, lock_rows=settings.schedule_row_locking)


def get_current_actor(authorization: Optional[str] = Header(default=None)) -> Actor:
    """
    Resolve the bearer token to the caller identity.

    The scheduler secret maps to the system scheduler (id 0); configured admin
    tokens map to their admin id. Anything else is rejected with 401.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authentication")

    token = authorization[len("Bearer "):]
    if settings.scheduler_secret and token == settings.scheduler_secret:
        return Actor(id=SYSTEM_SCHEDULER_ID, username="system-scheduler")

    admin_id = settings.admin_tokens.get(token)
    if admin_id is None:
        raise HTTPException(status_code=401, detail="Invalid authentication")
    return Actor(id=admin_id, username=f"admin-{admin_id}")
