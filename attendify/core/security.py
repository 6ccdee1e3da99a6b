"""
Authentication — JWT tokens (python-jose), password hashing (bcrypt via
passlib) and face-sample matching.

The ``Authenticator`` is built once at startup from an explicit
``AuthConfig``; it never reads process-wide settings on its own.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Protocol

from jose import JWTError, jwt
from passlib.context import CryptContext

from attendify.core.exceptions import Unauthorized

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ROLE_EMPLOYEE = "employee"
ROLE_ADMIN = "admin"


@dataclass(frozen=True)
class AuthConfig:
    secret_key: str
    algorithm: str
    employee_token_ttl: timedelta
    admin_token_ttl: timedelta
    admin_username: str
    admin_password_hash: str

    @classmethod
    def from_settings(cls, settings) -> "AuthConfig":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            employee_token_ttl=timedelta(days=settings.EMPLOYEE_TOKEN_EXPIRE_DAYS),
            admin_token_ttl=timedelta(hours=settings.ADMIN_TOKEN_EXPIRE_HOURS),
            admin_username=settings.ADMIN_USERNAME,
            admin_password_hash=pwd_context.hash(settings.ADMIN_PASSWORD),
        )


@dataclass(frozen=True)
class Identity:
    """Who the caller is, as carried by an access token."""

    subject: str
    role: str
    employee_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# ── Face matching ───────────────────────────────────────────────────
class FaceMatcher(Protocol):
    def match(self, sample: str, candidates: Iterable[tuple[str, str]]) -> str | None:
        """Return the employee id whose stored face matches *sample*."""


class ExactFaceMatcher:
    """Placeholder matcher: a stored face matches only an identical sample."""

    def match(self, sample: str, candidates: Iterable[tuple[str, str]]) -> str | None:
        for employee_id, stored in candidates:
            if stored and hmac.compare_digest(stored.encode(), sample.encode()):
                return employee_id
        return None


# ── Authenticator ───────────────────────────────────────────────────
class Authenticator:
    def __init__(self, config: AuthConfig, face_matcher: FaceMatcher | None = None) -> None:
        self.config = config
        self.face_matcher = face_matcher or ExactFaceMatcher()

    # Passwords
    @staticmethod
    def hash_password(plain: str) -> str:
        return pwd_context.hash(plain)

    @staticmethod
    def verify_password(plain: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        return pwd_context.verify(plain, hashed)

    # Tokens
    def issue_token(self, identity: Identity, expires_delta: timedelta | None = None) -> str:
        if expires_delta is None:
            expires_delta = (
                self.config.admin_token_ttl
                if identity.is_admin
                else self.config.employee_token_ttl
            )
        expire = datetime.now(timezone.utc) + expires_delta
        claims = {
            "exp": expire,
            "sub": identity.subject,
            "role": identity.role,
            "employee_id": identity.employee_id,
            "type": "access",
        }
        return jwt.encode(claims, self.config.secret_key, algorithm=self.config.algorithm)

    def identify(self, token: str) -> Identity:
        """Decode an access token or raise ``Unauthorized``."""
        try:
            payload = jwt.decode(
                token, self.config.secret_key, algorithms=[self.config.algorithm]
            )
        except JWTError as exc:
            raise Unauthorized("Invalid or expired token") from exc

        if payload.get("type") != "access" or not payload.get("sub"):
            raise Unauthorized("Invalid or expired token")
        role = payload.get("role")
        if role not in (ROLE_EMPLOYEE, ROLE_ADMIN):
            raise Unauthorized("Invalid or expired token")
        employee_id = payload.get("employee_id")
        if role == ROLE_EMPLOYEE and not employee_id:
            raise Unauthorized("Invalid or expired token")
        return Identity(subject=str(payload["sub"]), role=role, employee_id=employee_id)

    # Credentials
    def verify_admin(self, username: str, password: str) -> Identity:
        username_ok = hmac.compare_digest(
            username.encode(), self.config.admin_username.encode()
        )
        password_ok = self.verify_password(password, self.config.admin_password_hash)
        if not (username_ok and password_ok):
            raise Unauthorized("Invalid admin credentials")
        return Identity(subject="admin", role=ROLE_ADMIN)

    def verify_face(self, sample: str, candidates: Iterable[tuple[str, str]]) -> str | None:
        if not sample:
            return None
        return self.face_matcher.match(sample, candidates)
