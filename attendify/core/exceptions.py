"""
Domain errors and global exception handlers.

Services raise the ``AttendifyError`` subclasses below; the handlers turn
them (and any stray framework / database error) into JSON responses that
never leak a stack trace.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class AttendifyError(Exception):
    """Base class for errors the API reports to its caller."""

    status_code: int = 500
    kind: str = "error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or self.kind
        super().__init__(self.detail)


class InvalidSession(AttendifyError):
    """Invalid session"""

    status_code = 400
    kind = "invalid_session"


class InvalidDate(AttendifyError):
    """Date must use the YYYY-MM-DD format"""

    status_code = 400
    kind = "invalid_date"


class DuplicateCheckIn(AttendifyError):
    """Already checked in for this session"""

    status_code = 409
    kind = "duplicate_check_in"


class WrongLoginMethod(AttendifyError):
    """This account uses face recognition login"""

    status_code = 400
    kind = "wrong_login_method"


class UnknownEmployee(AttendifyError):
    """Employee is not registered"""

    status_code = 404
    kind = "unknown_employee"


class Conflict(AttendifyError):
    """Resource already exists"""

    status_code = 400
    kind = "conflict"


class Unauthorized(AttendifyError):
    """Could not validate credentials"""

    status_code = 401
    kind = "unauthorized"


class Forbidden(AttendifyError):
    """Admin access required"""

    status_code = 403
    kind = "forbidden"


class StorageUnavailable(AttendifyError):
    """Storage backend unavailable"""

    status_code = 500
    kind = "storage_unavailable"


# ── Handlers ────────────────────────────────────────────────────────
async def _attendify_error_handler(_request: Request, exc: AttendifyError) -> JSONResponse:
    if isinstance(exc, StorageUnavailable):
        logger.error("Storage failure: %s", exc.__cause__ or exc)
    else:
        logger.info("%s: %s", exc.kind, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.kind, "success": False},
        headers=headers,
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AttendifyError, _attendify_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
