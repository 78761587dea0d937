"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.am_common.database import async_session_factory
from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def signup_and_login(client: AsyncClient, make_admin: bool = False) -> dict[str, str]:
    """Provision a fresh user and return {"user_id", "Authorization"} headers data."""
    uid = uuid.uuid4().hex[:8]
    email = f"it_{uid}@example.com"
    resp = await client.post(
        "/api/v1/auth/signup",
        json={
            "email": email,
            "password": "TestPass1",
            "profile": {"full_name": f"User {uid}", "address": "12 MG Road", "city": "Pune"},
        },
    )
    assert resp.status_code == 201, resp.text
    if make_admin:
        async with async_session_factory() as db:
            await db.execute(
                text("UPDATE users SET is_admin = TRUE WHERE email = :email"), {"email": email}
            )
            await db.commit()
    login = await client.post("/api/v1/auth/login", json={"email": email, "password": "TestPass1"})
    token = login.json()["data"]["access_token"]
    return {"user_id": resp.json()["data"]["user_id"], "Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def seller(client: AsyncClient) -> dict[str, str]:
    return await signup_and_login(client)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def bidder(client: AsyncClient) -> dict[str, str]:
    return await signup_and_login(client)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin(client: AsyncClient) -> dict[str, str]:
    return await signup_and_login(client, make_admin=True)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def approved_auction(client: AsyncClient, seller: dict[str, str], admin: dict[str, str]):
    """Factory: submit an auction as ``seller``, approve it, return its id."""

    async def _create(seconds: int = 3600, starting_price: int = 1000) -> str:
        resp = await client.post(
            "/api/v1/auctions",
            headers={"Authorization": seller["Authorization"]},
            json={
                "title": "Integration lot",
                "starting_price": starting_price,
                "end_time": (datetime.now(UTC) + timedelta(seconds=seconds)).isoformat(),
            },
        )
        assert resp.status_code == 201, resp.text
        auction_id = resp.json()["data"]["id"]
        approve = await client.post(
            f"/api/v1/admin/auctions/{auction_id}/approve",
            headers={"Authorization": admin["Authorization"]},
        )
        assert approve.status_code == 200, approve.text
        return auction_id

    return _create
