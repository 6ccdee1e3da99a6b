"""
FastAPI dependencies — database session, services and auth guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from attendify.core.dates import parse_date_key
from attendify.core.exceptions import Forbidden, InvalidDate, Unauthorized
from attendify.core.security import ROLE_EMPLOYEE, Authenticator, Identity
from attendify.db.session import async_session_factory
from attendify.services.attendance_store import AttendanceStore
from attendify.services.directory import EmployeeDirectory
from attendify.services.reporting import ReportingAggregator

# auto_error=False so we can fall back to the cookie if the header is missing
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login/id", auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Services ────────────────────────────────────────────────────────
def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_store(db: AsyncSession = Depends(get_db)) -> AttendanceStore:
    return AttendanceStore(db)


def get_directory(db: AsyncSession = Depends(get_db)) -> EmployeeDirectory:
    return EmployeeDirectory(db)


def get_aggregator(store: AttendanceStore = Depends(get_store)) -> ReportingAggregator:
    return ReportingAggregator(store)


# ── Query parameters ────────────────────────────────────────────────
def parse_date_param(value: str | None, name: str) -> str | None:
    """Validate an optional YYYY-MM-DD query parameter."""
    if not value:
        return None
    try:
        return parse_date_key(value)
    except ValueError as exc:
        raise InvalidDate(f"{name} must use the YYYY-MM-DD format") from exc


# ── Auth dependencies ───────────────────────────────────────────────
def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),  # HttpOnly cookie
    authenticator: Authenticator = Depends(get_authenticator),
) -> Identity:
    """Decode the JWT from the Authorization header, else from the cookie."""
    final_token = token
    if not final_token and access_token:
        # Login sets the cookie as "Bearer <token>"
        if access_token.startswith("Bearer "):
            final_token = access_token.split(" ", 1)[1]
        else:
            final_token = access_token

    if not final_token:
        raise Unauthorized("Access token required")
    return authenticator.identify(final_token)


def require_employee(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Only callers acting as an employee can check in."""
    if identity.role != ROLE_EMPLOYEE or not identity.employee_id:
        raise Forbidden("Employee access required")
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Only allow admin role to proceed."""
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity
