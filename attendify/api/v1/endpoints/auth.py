"""
Auth endpoints — registration, employee login (password or face), admin
login and logout.

Every login returns the token in the body and also sets it as an
HttpOnly cookie.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from attendify.api.v1.deps import get_authenticator, get_current_identity, get_directory
from attendify.core.config import settings
from attendify.core.exceptions import Unauthorized, WrongLoginMethod
from attendify.core.rate_limit import limiter
from attendify.core.security import Authenticator, Identity
from attendify.models.user import User
from attendify.schemas.user import (AdminLoginRequest, AdminPublic, AuthResponse,
                                    FaceLoginRequest, IdentityRead, IdLoginRequest,
                                    LogoutResponse, RegisterRequest, UserPublic)
from attendify.services.directory import EmployeeDirectory

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_auth_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key="access_token",
        value=f"Bearer {token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=max_age,
    )


def _employee_session(
    user: User, authenticator: Authenticator, response: Response, message: str
) -> AuthResponse:
    identity = Identity(subject=str(user.id), role=user.role, employee_id=user.employee_id)
    token = authenticator.issue_token(identity)
    _set_auth_cookie(
        response, token, int(authenticator.config.employee_token_ttl.total_seconds())
    )
    return AuthResponse(message=message, token=token, user=UserPublic.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    response: Response,
    directory: EmployeeDirectory = Depends(get_directory),
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthResponse:
    """Register an employee with a password or a stored face image."""
    password_hash = (
        authenticator.hash_password(body.password)
        if body.login_method == "id" and body.password
        else None
    )
    user = await directory.register(
        name=body.name,
        email=body.email,
        employee_id=body.employee_id,
        login_method=body.login_method,
        password_hash=password_hash,
        face_data=body.face_data,
    )
    return _employee_session(user, authenticator, response, "User registered successfully")


@router.post("/login/id", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_with_id(
    request: Request,
    response: Response,
    body: IdLoginRequest,
    directory: EmployeeDirectory = Depends(get_directory),
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthResponse:
    """Authenticate with employee ID and password."""
    user = await directory.get_active(body.employee_id)
    if user is None:
        logger.info("Login failed for unknown employee %s", body.employee_id)
        raise Unauthorized("Invalid credentials")

    if user.login_method != "id" or not user.hashed_password:
        raise WrongLoginMethod()

    if not authenticator.verify_password(body.password, user.hashed_password):
        logger.info("Login failed for employee %s: bad password", body.employee_id)
        raise Unauthorized("Invalid credentials")

    logger.info("Employee %s logged in (id)", user.employee_id)
    return _employee_session(user, authenticator, response, "Login successful")


@router.post("/login/face", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_with_face(
    request: Request,
    response: Response,
    body: FaceLoginRequest,
    directory: EmployeeDirectory = Depends(get_directory),
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthResponse:
    """Authenticate with a face sample."""
    employee_id = authenticator.verify_face(body.face_data, await directory.face_candidates())
    user = await directory.get_active(employee_id) if employee_id else None
    if user is None:
        logger.info("Face login failed: no matching employee")
        raise Unauthorized("Face not recognized. Please try again or use ID login.")

    logger.info("Employee %s logged in (face)", user.employee_id)
    return _employee_session(user, authenticator, response, "Login successful")


@router.post("/admin/login", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def admin_login(
    request: Request,
    response: Response,
    body: AdminLoginRequest,
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthResponse:
    """Authenticate with the configured administrator credentials."""
    try:
        identity = authenticator.verify_admin(body.username, body.password)
    except Unauthorized:
        logger.warning("Admin login failed for username %r", body.username)
        raise

    token = authenticator.issue_token(identity)
    _set_auth_cookie(response, token, int(authenticator.config.admin_token_ttl.total_seconds()))
    logger.info("Admin logged in")
    return AuthResponse(
        message="Admin login successful",
        token=token,
        user=AdminPublic(username=authenticator.config.admin_username),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    """Clear the auth cookie and end the session."""
    response.delete_cookie("access_token")
    return LogoutResponse(message="Logged out")


@router.get("/me", response_model=IdentityRead)
async def read_current_identity(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Return the identity carried by the caller's token."""
    return identity

