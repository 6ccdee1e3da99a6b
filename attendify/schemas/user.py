"""Pydantic schemas for registration, login and user listings."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator, model_validator

_EMPLOYEE_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _clean_employee_id(v: str) -> str:
    v = v.strip()
    if not _EMPLOYEE_ID_RE.match(v):
        raise ValueError("Employee ID must be 1-64 letters, digits, dots, dashes or underscores")
    return v


class RegisterRequest(BaseModel):
    name: str
    email: str
    employee_id: str
    login_method: Literal["face", "id"]
    password: str | None = None
    face_data: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("employee_id")
    @classmethod
    def _employee_id(cls, v: str) -> str:
        return _clean_employee_id(v)

    @model_validator(mode="after")
    def _credential_matches_method(self) -> "RegisterRequest":
        if self.login_method == "id" and not self.password:
            raise ValueError("Password is required for ID-based login")
        if self.login_method == "face" and not self.face_data:
            raise ValueError("Face data is required for face login")
        return self


class IdLoginRequest(BaseModel):
    employee_id: str
    password: str

    @field_validator("employee_id")
    @classmethod
    def _employee_id(cls, v: str) -> str:
        return v.strip()


class FaceLoginRequest(BaseModel):
    face_data: str

    @field_validator("face_data")
    @classmethod
    def _face(cls, v: str) -> str:
        if not v:
            raise ValueError("Face data must not be empty")
        return v


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class UserPublic(BaseModel):
    id: int
    name: str
    email: str
    employee_id: str
    login_method: str
    role: str

    model_config = {"from_attributes": True}


class UserRead(UserPublic):
    is_active: bool
    registered_at: datetime | None


class BackupUser(UserRead):
    """Full user row for export; only the password hash is left out."""

    face_data: str | None = None


class AdminPublic(BaseModel):
    username: str
    role: str = "admin"


class AuthResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserPublic | AdminPublic


class IdentityRead(BaseModel):
    subject: str
    role: str
    employee_id: str | None = None

    model_config = {"from_attributes": True}


class LogoutResponse(BaseModel):
    message: str
