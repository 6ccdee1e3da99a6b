"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from attendify.api.v1.endpoints import admin, attendance, auth, reports

api_router = APIRouter()

# Registration, logins, logout
api_router.include_router(auth.router)

# Employee check-ins and history
api_router.include_router(attendance.router)

# Admin reports, stats, health
api_router.include_router(reports.router)

# Admin user listing and backup
api_router.include_router(admin.router)
