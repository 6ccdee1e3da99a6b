"""
User model — the employee directory.

The administrator is not a row here; admin credentials come from
configuration.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from attendify.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    employee_id: str = Column(String(64), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str | None = Column(String(128), nullable=True)  # type: ignore[assignment]
    face_data: str | None = Column(Text, nullable=True)  # type: ignore[assignment]  # base64 image
    login_method: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # face | id
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="employee",
        server_default="employee",
    )  # employee | admin
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    registered_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
