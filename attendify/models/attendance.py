"""
AttendanceRecord model — one row per employee per calendar day.

Each of the four daily session slots is its own nullable timestamp column,
so "set this slot only if it is still empty" is a single conditional
UPDATE.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint

from attendify.db.base import Base


class SessionSlot(str, enum.Enum):
    MORNING = "morning"
    LUNCH = "lunch"
    POST = "post"
    EVENING = "evening"


SESSION_SLOTS: tuple[str, ...] = tuple(slot.value for slot in SessionSlot)
FULL_DAY_SESSIONS = len(SESSION_SLOTS)


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
        Index("ix_attendance_date", "date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: str = Column(  # type: ignore[assignment]
        String(64), ForeignKey("users.employee_id"), nullable=False, index=True
    )
    date: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    morning: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    lunch: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    post: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    evening: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def sessions(self) -> dict[str, datetime]:
        """Set slots only, in slot order."""
        return {
            slot: getattr(self, slot)
            for slot in SESSION_SLOTS
            if getattr(self, slot) is not None
        }

    @property
    def session_count(self) -> int:
        return len(self.sessions)
