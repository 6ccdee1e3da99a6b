"""
Reporting endpoints — daily / monthly compliance reports, dashboard stats
and the public health check.

Each report loads the active employee snapshot and the window's records
in one query apiece and aggregates in Python.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from attendify.api.v1.deps import (get_aggregator, get_db, get_directory,
                                   parse_date_param, require_admin)
from attendify.core.dates import today_key, utc_now
from attendify.core.security import Identity
from attendify.schemas.attendance import (DailyReportResponse, DashboardStatsResponse,
                                          HealthResponse, MonthlyReportResponse)
from attendify.services.directory import EmployeeDirectory
from attendify.services.reporting import ReportingAggregator

router = APIRouter(tags=["reports"])
logger = logging.getLogger(__name__)


@router.get("/admin/attendance/daily", response_model=DailyReportResponse)
async def daily_report(
    date: str | None = Query(default=None, description="YYYY-MM-DD, defaults to today"),
    directory: EmployeeDirectory = Depends(get_directory),
    aggregator: ReportingAggregator = Depends(get_aggregator),
    _admin: Identity = Depends(require_admin),
) -> DailyReportResponse:
    """Every active employee's sessions and status for one day."""
    target_date = parse_date_param(date, "date") or today_key()
    employees = await directory.list_active()
    rows = await aggregator.daily_report(target_date, employees)
    return DailyReportResponse(
        date=target_date,
        report=[
            {
                "employee_id": row.employee_id,
                "name": row.name,
                "email": row.email,
                "sessions": row.sessions,
                "session_count": row.session_count,
                "status": row.status,
            }
            for row in rows
        ],
    )


@router.get("/admin/attendance/monthly", response_model=MonthlyReportResponse)
async def monthly_report(
    year: int | None = Query(default=None, ge=1, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    directory: EmployeeDirectory = Depends(get_directory),
    aggregator: ReportingAggregator = Depends(get_aggregator),
    _admin: Identity = Depends(require_admin),
) -> MonthlyReportResponse:
    """Full / partial / absent day counts per active employee for a month."""
    now = utc_now()
    target_year = year or now.year
    target_month = month or now.month

    employees = await directory.list_active()
    rows = await aggregator.monthly_report(target_year, target_month, employees)
    return MonthlyReportResponse(
        year=target_year,
        month=target_month,
        report=[
            {
                "employee_id": row.employee_id,
                "name": row.name,
                "email": row.email,
                "total_days": row.total_days,
                "present_days": row.present_days,
                "partial_days": row.partial_days,
                "absent_days": row.absent_days,
                "attendance_percentage": row.attendance_percentage,
            }
            for row in rows
        ],
    )


@router.get("/admin/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    directory: EmployeeDirectory = Depends(get_directory),
    aggregator: ReportingAggregator = Depends(get_aggregator),
    _admin: Identity = Depends(require_admin),
) -> DashboardStatsResponse:
    """Headcount, today's full-day count, month average and compliance rate."""
    employees = await directory.list_active()
    stats = await aggregator.dashboard_stats(utc_now(), employees)
    return DashboardStatsResponse(
        total_employees=stats.total_employees,
        present_today=stats.present_today,
        month_average=stats.month_average,
        compliance_rate=stats.compliance_rate,
    )


# ── Health ──────────────────────────────────────────────────────────
@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — database connectivity."""
    db_ok = False
    try:
        await db.execute(select(1))
        db_ok = True
    except SQLAlchemyError as e:
        logger.error("Health check DB failure: %s", e)

    return HealthResponse(
        status="OK" if db_ok else "DEGRADED",
        message="Attendance System API is running",
        db=db_ok,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
