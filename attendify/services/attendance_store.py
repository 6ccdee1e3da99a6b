"""
Attendance record store.

Owns every write to ``attendance_records``.  Two guarantees hold under
concurrent requests:

* one row per (employee_id, date) — the unique constraint decides the
  winner when two requests create the same day's record;
* a session slot is set at most once — the slot is written with
  ``UPDATE ... WHERE <slot> IS NULL`` and zero affected rows means the
  slot was already taken.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from attendify.core.dates import utc_now
from attendify.core.exceptions import (DuplicateCheckIn, InvalidSession, StorageUnavailable,
                                       UnknownEmployee)
from attendify.models.attendance import SESSION_SLOTS, AttendanceRecord

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 30


@contextmanager
def _storage_guard(operation: str) -> Iterator[None]:
    """Re-raise driver failures as ``StorageUnavailable``."""
    try:
        yield
    except IntegrityError:
        raise
    except SQLAlchemyError as exc:
        logger.error("Attendance store %s failed: %s", operation, exc)
        raise StorageUnavailable(f"Attendance storage unavailable during {operation}") from exc


class AttendanceStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Writes ──────────────────────────────────────────────────────
    async def mark_session(
        self,
        employee_id: str,
        date: str,
        slot: str,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Check *employee_id* in for *slot* on *date*.

        Raises ``InvalidSession`` for an unknown slot, ``UnknownEmployee``
        when *employee_id* is not in the directory and ``DuplicateCheckIn``
        when the slot is already set.
        """
        if slot not in SESSION_SLOTS:
            raise InvalidSession(
                f"Invalid session '{slot}'. Must be one of: {', '.join(SESSION_SLOTS)}"
            )
        now = now or utc_now()

        with _storage_guard("mark_session"):
            await self._ensure_record(employee_id, date)

            result = await self.db.execute(
                update(AttendanceRecord)
                .where(
                    AttendanceRecord.employee_id == employee_id,
                    AttendanceRecord.date == date,
                    getattr(AttendanceRecord, slot).is_(None),
                )
                .values({slot: now, "updated_at": now})
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

            record = await self._fetch(employee_id, date, refresh=True)
            if record is None:
                raise StorageUnavailable(
                    f"Attendance record for {employee_id} on {date} is missing after check-in"
                )
            if result.rowcount == 0:
                logger.info(
                    "Duplicate check-in rejected: %s %s %s", employee_id, date, slot
                )
                raise DuplicateCheckIn("Already checked in for this session")

        logger.info("Checked in %s for %s on %s", employee_id, slot, date)
        return record  # type: ignore[return-value]

    async def _ensure_record(self, employee_id: str, date: str) -> None:
        """Create the day's empty record unless it already exists."""
        if await self._fetch(employee_id, date) is not None:
            return
        try:
            self.db.add(AttendanceRecord(employee_id=employee_id, date=date))
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            # Only a lost creation race leaves the row behind; anything else
            # (an employee id missing from the directory) is a real failure.
            if await self._fetch(employee_id, date) is None:
                logger.warning("Check-in rejected for unregistered employee %s", employee_id)
                raise UnknownEmployee(f"Employee {employee_id} is not registered") from exc
            logger.info("Race condition handled for %s on %s", employee_id, date)

    # ── Reads ───────────────────────────────────────────────────────
    async def _fetch(
        self, employee_id: str, date: str, refresh: bool = False
    ) -> AttendanceRecord | None:
        stmt = select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date == date,
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_record(self, employee_id: str, date: str) -> AttendanceRecord | None:
        """The day's record, or ``None`` if the employee has not checked in."""
        with _storage_guard("get_record"):
            return await self._fetch(employee_id, date, refresh=True)

    async def query_history(
        self,
        employee_id: str,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[AttendanceRecord]:
        """Newest-first records, with independently optional inclusive bounds."""
        stmt = select(AttendanceRecord).where(AttendanceRecord.employee_id == employee_id)
        if start_date:
            stmt = stmt.where(AttendanceRecord.date >= start_date)
        if end_date:
            stmt = stmt.where(AttendanceRecord.date <= end_date)
        stmt = stmt.order_by(AttendanceRecord.date.desc()).limit(limit)

        with _storage_guard("query_history"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def query_by_date(self, date: str) -> list[AttendanceRecord]:
        with _storage_guard("query_by_date"):
            result = await self.db.execute(
                select(AttendanceRecord)
                .where(AttendanceRecord.date == date)
                .order_by(AttendanceRecord.employee_id)
            )
            return list(result.scalars().all())

    async def query_by_date_range(self, start_date: str, end_date: str) -> list[AttendanceRecord]:
        with _storage_guard("query_by_date_range"):
            result = await self.db.execute(
                select(AttendanceRecord)
                .where(AttendanceRecord.date >= start_date, AttendanceRecord.date <= end_date)
                .order_by(AttendanceRecord.employee_id, AttendanceRecord.date)
            )
            return list(result.scalars().all())

    async def list_all(self) -> list[AttendanceRecord]:
        with _storage_guard("list_all"):
            result = await self.db.execute(
                select(AttendanceRecord).order_by(
                    AttendanceRecord.date.desc(), AttendanceRecord.employee_id
                )
            )
            return list(result.scalars().all())
