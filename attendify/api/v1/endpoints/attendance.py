"""
Employee check-in endpoints — mark a session, history, today's status.

All routes act on the employee carried by the caller's token; an employee
can only ever read or write their own records.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from attendify.api.v1.deps import get_store, parse_date_param, require_employee
from attendify.core.config import settings
from attendify.core.dates import today_key
from attendify.core.security import Identity
from attendify.schemas.attendance import (AttendanceRead, HistoryResponse, MarkRequest,
                                          MarkResponse, TodayResponse)
from attendify.services.attendance_store import AttendanceStore

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/mark", response_model=MarkResponse)
async def mark_attendance(
    body: MarkRequest,
    identity: Identity = Depends(require_employee),
    store: AttendanceStore = Depends(get_store),
) -> MarkResponse:
    """Check in for one of today's four sessions."""
    date = body.date or today_key()
    record = await store.mark_session(identity.employee_id, date, body.session)
    return MarkResponse(
        message="Attendance marked successfully",
        attendance=AttendanceRead.model_validate(record),
    )


@router.get("/history", response_model=HistoryResponse)
async def attendance_history(
    start_date: str | None = Query(default=None, description="YYYY-MM-DD, inclusive"),
    end_date: str | None = Query(default=None, description="YYYY-MM-DD, inclusive"),
    limit: int = Query(default=settings.HISTORY_DEFAULT_LIMIT, ge=1, le=366),
    identity: Identity = Depends(require_employee),
    store: AttendanceStore = Depends(get_store),
) -> HistoryResponse:
    """Newest-first attendance history for the caller."""
    records = await store.query_history(
        identity.employee_id,
        start_date=parse_date_param(start_date, "start_date"),
        end_date=parse_date_param(end_date, "end_date"),
        limit=limit,
    )
    return HistoryResponse(
        attendance=[AttendanceRead.model_validate(r) for r in records]
    )


@router.get("/today", response_model=TodayResponse)
async def attendance_today(
    identity: Identity = Depends(require_employee),
    store: AttendanceStore = Depends(get_store),
) -> TodayResponse:
    """Today's checked-in sessions; an empty mapping until the first check-in."""
    today = today_key()
    record = await store.get_record(identity.employee_id, today)
    sessions = record.sessions if record is not None else {}
    return TodayResponse(date=today, sessions=sessions, completed_count=len(sessions))
