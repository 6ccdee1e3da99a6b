"""Pydantic schemas for attendance, reports and admin exports."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from attendify.core.dates import parse_date_key
from attendify.schemas.user import BackupUser, UserRead


# ── Check-in ────────────────────────────────────────────────────────
class MarkRequest(BaseModel):
    session: str
    date: str | None = None  # YYYY-MM-DD, defaults to today (UTC)

    @field_validator("date")
    @classmethod
    def _date(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return parse_date_key(v)


class AttendanceRead(BaseModel):
    employee_id: str
    date: str
    sessions: dict[str, datetime]
    session_count: int
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class MarkResponse(BaseModel):
    message: str
    attendance: AttendanceRead


class HistoryResponse(BaseModel):
    attendance: list[AttendanceRead]


class TodayResponse(BaseModel):
    date: str
    sessions: dict[str, datetime]
    completed_count: int


# ── Reports ─────────────────────────────────────────────────────────
class DailyReportItem(BaseModel):
    employee_id: str
    name: str
    email: str
    sessions: dict[str, datetime]
    session_count: int
    status: str


class DailyReportResponse(BaseModel):
    date: str
    report: list[DailyReportItem]


class MonthlyReportItem(BaseModel):
    employee_id: str
    name: str
    email: str
    total_days: int
    present_days: int
    partial_days: int
    absent_days: int
    attendance_percentage: str


class MonthlyReportResponse(BaseModel):
    year: int
    month: int
    report: list[MonthlyReportItem]


class DashboardStatsResponse(BaseModel):
    total_employees: int
    present_today: int
    month_average: str
    compliance_rate: str


# ── Admin ───────────────────────────────────────────────────────────
class UserListResponse(BaseModel):
    users: list[UserRead]


class BackupData(BaseModel):
    users: list[BackupUser]
    attendance: list[AttendanceRead]


class BackupResponse(BaseModel):
    timestamp: str
    version: str = "1.0"
    data: BackupData


# ── Health ──────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    status: str
    message: str
    db: bool
    timestamp: str
