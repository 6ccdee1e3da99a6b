"""
Admin endpoints — employee listing and full data backup.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from attendify.api.v1.deps import get_directory, get_store, require_admin
from attendify.core.security import Identity
from attendify.schemas.attendance import (AttendanceRead, BackupData, BackupResponse,
                                          UserListResponse)
from attendify.schemas.user import BackupUser, UserRead
from attendify.services.attendance_store import AttendanceStore
from attendify.services.directory import EmployeeDirectory

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


@router.get("/users", response_model=UserListResponse)
async def list_users(
    directory: EmployeeDirectory = Depends(get_directory),
    _admin: Identity = Depends(require_admin),
) -> UserListResponse:
    """All registered employees, newest first.  Password hashes are never returned."""
    users = await directory.list_users()
    return UserListResponse(users=[UserRead.model_validate(u) for u in users])


@router.get("/backup", response_model=BackupResponse)
async def backup(
    directory: EmployeeDirectory = Depends(get_directory),
    store: AttendanceStore = Depends(get_store),
    _admin: Identity = Depends(require_admin),
) -> BackupResponse:
    """Export every user and attendance record as one JSON document."""
    users = await directory.list_users(role=None)
    records = await store.list_all()
    logger.warning(
        "ADMIN exported backup (%d users, %d attendance records)", len(users), len(records)
    )
    return BackupResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=BACKUP_VERSION,
        data=BackupData(
            users=[BackupUser.model_validate(u) for u in users],
            attendance=[AttendanceRead.model_validate(r) for r in records],
        ),
    )
