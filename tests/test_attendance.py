"""
Check-in endpoint tests — mark, history and today.
"""

import pytest
from httpx import AsyncClient

from attendify.core.dates import today_key


async def _mark(client: AsyncClient, headers, session: str, date: str | None = None):
    body = {"session": session}
    if date is not None:
        body["date"] = date
    return await client.post("/api/v1/attendance/mark", json=body, headers=headers)


@pytest.mark.asyncio
async def test_mark_session(async_client: AsyncClient, employee_headers):
    response = await _mark(async_client, employee_headers(), "morning", "2024-03-11")
    assert response.status_code == 200

    data = response.json()
    assert data["message"] == "Attendance marked successfully"
    assert data["attendance"]["employee_id"] == "EMP-001"
    assert data["attendance"]["date"] == "2024-03-11"
    assert list(data["attendance"]["sessions"]) == ["morning"]
    assert data["attendance"]["session_count"] == 1


@pytest.mark.asyncio
async def test_mark_defaults_to_today(async_client: AsyncClient, employee_headers):
    response = await _mark(async_client, employee_headers(), "lunch")
    assert response.status_code == 200
    assert response.json()["attendance"]["date"] == today_key()
    assert "lunch" in response.json()["attendance"]["sessions"]


@pytest.mark.asyncio
async def test_mark_invalid_session(async_client: AsyncClient, employee_headers):
    response = await _mark(async_client, employee_headers(), "brunch")
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_session"
    assert response.json()["detail"].startswith("Invalid session")


@pytest.mark.asyncio
async def test_mark_session_name_must_match_exactly(async_client: AsyncClient, employee_headers):
    """Session names are not case-folded or trimmed."""
    for name in ("MORNING", " lunch ", "Evening"):
        response = await _mark(async_client, employee_headers(), name, "2024-03-11")
        assert response.status_code == 400, name
        assert response.json()["error"] == "invalid_session"


@pytest.mark.asyncio
async def test_mark_invalid_date(async_client: AsyncClient, employee_headers):
    response = await _mark(async_client, employee_headers(), "morning", "2024-02-30")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_mark_twice_conflicts(async_client: AsyncClient, employee_headers):
    headers = employee_headers()
    assert (await _mark(async_client, headers, "post", "2024-03-11")).status_code == 200

    again = await _mark(async_client, headers, "post", "2024-03-11")
    assert again.status_code == 409
    assert again.json()["detail"] == "Already checked in for this session"
    assert again.json()["error"] == "duplicate_check_in"


@pytest.mark.asyncio
async def test_mark_requires_token(async_client: AsyncClient):
    response = await _mark(async_client, {}, "morning")
    assert response.status_code == 401
    assert response.json()["detail"] == "Access token required"


@pytest.mark.asyncio
async def test_admin_cannot_mark(async_client: AsyncClient, admin_headers):
    response = await _mark(async_client, admin_headers, "morning")
    assert response.status_code == 403


# ── History ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_history_only_returns_callers_records(async_client: AsyncClient, employee_headers):
    mine = employee_headers("EMP-001")
    theirs = employee_headers("EMP-002")
    for day in ("2024-03-01", "2024-03-05", "2024-03-09"):
        await _mark(async_client, mine, "morning", day)
    await _mark(async_client, theirs, "morning", "2024-03-07")

    response = await async_client.get("/api/v1/attendance/history", headers=mine)
    assert response.status_code == 200
    dates = [r["date"] for r in response.json()["attendance"]]
    assert dates == ["2024-03-09", "2024-03-05", "2024-03-01"]


@pytest.mark.asyncio
async def test_history_filters_and_limit(async_client: AsyncClient, employee_headers):
    headers = employee_headers()
    for day in ("2024-03-01", "2024-03-05", "2024-03-09", "2024-03-12"):
        await _mark(async_client, headers, "morning", day)

    ranged = await async_client.get(
        "/api/v1/attendance/history",
        params={"start_date": "2024-03-05", "end_date": "2024-03-09"},
        headers=headers,
    )
    assert [r["date"] for r in ranged.json()["attendance"]] == ["2024-03-09", "2024-03-05"]

    limited = await async_client.get(
        "/api/v1/attendance/history", params={"limit": 1}, headers=headers
    )
    assert [r["date"] for r in limited.json()["attendance"]] == ["2024-03-12"]


@pytest.mark.asyncio
async def test_history_rejects_malformed_date(async_client: AsyncClient, employee_headers):
    response = await async_client.get(
        "/api/v1/attendance/history",
        params={"start_date": "03/05/2024"},
        headers=employee_headers(),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_date"


# ── Today ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_today_before_and_after_check_in(async_client: AsyncClient, employee_headers):
    headers = employee_headers()

    empty = await async_client.get("/api/v1/attendance/today", headers=headers)
    assert empty.status_code == 200
    assert empty.json() == {"date": today_key(), "sessions": {}, "completed_count": 0}

    await _mark(async_client, headers, "morning")
    await _mark(async_client, headers, "evening")

    after = await async_client.get("/api/v1/attendance/today", headers=headers)
    assert after.json()["completed_count"] == 2
    assert set(after.json()["sessions"]) == {"morning", "evening"}
