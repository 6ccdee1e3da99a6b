"""
Reporting aggregator — daily, monthly and dashboard summaries.

The ``build_*`` functions are pure: they take an employee snapshot and the
records already loaded for the window and do all the arithmetic in
Python.  ``ReportingAggregator`` loads those records from the store (one
query per report) and hands them over.

Only full days (all four sessions) count as present; partial days are
reported separately but never raise the attendance percentage.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from attendify.core.dates import (days_in_month, month_bounds, month_day_keys,
                                  today_key, utc_now)
from attendify.models.attendance import FULL_DAY_SESSIONS, AttendanceRecord
from attendify.services.attendance_store import AttendanceStore
from attendify.services.directory import EmployeeSnapshot

STATUS_FULL = "full"
STATUS_PARTIAL = "partial"
STATUS_ABSENT = "absent"


@dataclass
class DailyReportRow:
    employee_id: str
    name: str
    email: str
    sessions: dict[str, datetime] = field(default_factory=dict)
    session_count: int = 0
    status: str = STATUS_ABSENT


@dataclass
class MonthlyReportRow:
    employee_id: str
    name: str
    email: str
    total_days: int
    present_days: int
    partial_days: int
    absent_days: int
    attendance_percentage: str


@dataclass
class DashboardStats:
    total_employees: int
    present_today: int
    month_average: str
    compliance_rate: str


# ── Helpers ─────────────────────────────────────────────────────────
def classify_day(session_count: int) -> str:
    if session_count == FULL_DAY_SESSIONS:
        return STATUS_FULL
    if session_count > 0:
        return STATUS_PARTIAL
    return STATUS_ABSENT


def _percentage(numerator: int, denominator: int) -> str:
    return f"{numerator / denominator * 100:.2f}"


def _is_full(record: AttendanceRecord) -> bool:
    return record.session_count == FULL_DAY_SESSIONS


# ── Pure builders ───────────────────────────────────────────────────
def build_daily_report(
    employees: Sequence[EmployeeSnapshot],
    records: Iterable[AttendanceRecord],
) -> list[DailyReportRow]:
    """One row per employee, in directory order, for a single day's records."""
    by_employee = {record.employee_id: record for record in records}

    report = []
    for emp in employees:
        record = by_employee.get(emp.employee_id)
        sessions = record.sessions if record is not None else {}
        report.append(
            DailyReportRow(
                employee_id=emp.employee_id,
                name=emp.name,
                email=emp.email,
                sessions=sessions,
                session_count=len(sessions),
                status=classify_day(len(sessions)),
            )
        )
    return report


def build_monthly_report(
    year: int,
    month: int,
    employees: Sequence[EmployeeSnapshot],
    records: Iterable[AttendanceRecord],
) -> list[MonthlyReportRow]:
    total_days = days_in_month(year, month)
    day_keys = month_day_keys(year, month)

    counts: dict[str, dict[str, int]] = defaultdict(dict)
    for record in records:
        counts[record.employee_id][record.date] = record.session_count

    report = []
    for emp in employees:
        emp_days = counts.get(emp.employee_id, {})
        tally = {STATUS_FULL: 0, STATUS_PARTIAL: 0, STATUS_ABSENT: 0}
        for key in day_keys:
            tally[classify_day(emp_days.get(key, 0))] += 1

        report.append(
            MonthlyReportRow(
                employee_id=emp.employee_id,
                name=emp.name,
                email=emp.email,
                total_days=total_days,
                present_days=tally[STATUS_FULL],
                partial_days=tally[STATUS_PARTIAL],
                absent_days=tally[STATUS_ABSENT],
                attendance_percentage=_percentage(tally[STATUS_FULL], total_days),
            )
        )
    return report


def build_dashboard_stats(
    now: datetime,
    employees: Sequence[EmployeeSnapshot],
    today_records: Iterable[AttendanceRecord],
    month_records: Iterable[AttendanceRecord],
) -> DashboardStats:
    total_employees = len(employees)
    present_today = sum(1 for record in today_records if _is_full(record))
    full_days = sum(1 for record in month_records if _is_full(record))

    if total_employees == 0:
        return DashboardStats(
            total_employees=0,
            present_today=present_today,
            month_average="0%",
            compliance_rate="0%",
        )

    possible_days = total_employees * days_in_month(now.year, now.month)
    return DashboardStats(
        total_employees=total_employees,
        present_today=present_today,
        month_average=f"{_percentage(full_days, possible_days)}%",
        compliance_rate=f"{_percentage(present_today, total_employees)}%",
    )


# ── Store-backed facade ─────────────────────────────────────────────
class ReportingAggregator:
    def __init__(self, store: AttendanceStore) -> None:
        self.store = store

    async def daily_report(
        self, date: str, employees: Sequence[EmployeeSnapshot]
    ) -> list[DailyReportRow]:
        records = await self.store.query_by_date(date)
        return build_daily_report(employees, records)

    async def monthly_report(
        self, year: int, month: int, employees: Sequence[EmployeeSnapshot]
    ) -> list[MonthlyReportRow]:
        start, end = month_bounds(year, month)
        records = await self.store.query_by_date_range(start, end)
        return build_monthly_report(year, month, employees, records)

    async def dashboard_stats(
        self, now: datetime | None, employees: Sequence[EmployeeSnapshot]
    ) -> DashboardStats:
        now = now or utc_now()
        start, end = month_bounds(now.year, now.month)
        today_records = await self.store.query_by_date(today_key(now))
        month_records = await self.store.query_by_date_range(start, end)
        return build_dashboard_stats(now, employees, today_records, month_records)
