"""
Employee directory — the ``users`` table seen from the attendance core.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from attendify.core.exceptions import Conflict
from attendify.core.security import ROLE_EMPLOYEE
from attendify.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeSnapshot:
    employee_id: str
    name: str
    email: str


class EmployeeDirectory:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def register(
        self,
        *,
        name: str,
        email: str,
        employee_id: str,
        login_method: str,
        password_hash: str | None = None,
        face_data: str | None = None,
    ) -> User:
        existing = await self.db.execute(
            select(User.id).where(or_(User.email == email, User.employee_id == employee_id))
        )
        if existing.first() is not None:
            raise Conflict("User with this email or employee ID already exists")

        user = User(
            name=name,
            email=email,
            employee_id=employee_id,
            login_method=login_method,
            hashed_password=password_hash if login_method == "id" else None,
            face_data=face_data if login_method == "face" else None,
            role=ROLE_EMPLOYEE,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise Conflict("User with this email or employee ID already exists") from exc
        await self.db.refresh(user)
        logger.info("Registered employee %s (%s, %s login)", employee_id, email, login_method)
        return user

    async def get_active(self, employee_id: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.employee_id == employee_id, User.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def face_candidates(self) -> list[tuple[str, str]]:
        """(employee_id, face_data) for every active face-login employee."""
        result = await self.db.execute(
            select(User.employee_id, User.face_data).where(
                User.login_method == "face",
                User.is_active.is_(True),
                User.face_data.is_not(None),
            )
        )
        return [(row.employee_id, row.face_data) for row in result.all()]

    async def list_active(self, role: str = ROLE_EMPLOYEE) -> list[EmployeeSnapshot]:
        result = await self.db.execute(
            select(User.employee_id, User.name, User.email)
            .where(User.role == role, User.is_active.is_(True))
            .order_by(User.name, User.employee_id)
        )
        return [
            EmployeeSnapshot(employee_id=row.employee_id, name=row.name, email=row.email)
            for row in result.all()
        ]

    async def list_users(self, role: str | None = ROLE_EMPLOYEE) -> list[User]:
        stmt = select(User).order_by(User.registered_at.desc(), User.id.desc())
        if role is not None:
            stmt = stmt.where(User.role == role)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
