"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool)
built from the ORM metadata.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

os.environ["VERDANT_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["VERDANT_JWT_SECRET"] = "test-secret-key-with-at-least-32-bytes"
os.environ["VERDANT_LOG_FORMAT"] = "console"
os.environ["VERDANT_ENVIRONMENT"] = "test"

from verdant.config import get_settings  # noqa: E402

get_settings.cache_clear()

from verdant.auth.jwt import create_access_token  # noqa: E402
from verdant.database import close_db, create_tables, get_session, init_db  # noqa: E402
from verdant.db.models import Profile  # noqa: E402
from verdant.game.seed import seed_catalogs  # noqa: E402
from verdant.storage.sql_gateway import SqlAlchemyGateway  # noqa: E402

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh, empty schema."""
    await init_db(get_settings().database_url)
    await create_tables()
    sessions = get_session()
    session = await anext(sessions)
    yield session
    await sessions.aclose()
    await close_db()


@pytest_asyncio.fixture
async def seeded_session(db_session: AsyncSession) -> AsyncSession:
    """Session with achievement, badge and challenge catalogs seeded."""
    await seed_catalogs(db_session)
    return db_session


@pytest_asyncio.fixture
async def gateway(db_session: AsyncSession) -> SqlAlchemyGateway:
    return SqlAlchemyGateway(db_session)


@pytest.fixture
def make_profile(gateway: SqlAlchemyGateway) -> Callable[..., Awaitable[Profile]]:
    """Create a profile, optionally overriding progression fields."""

    async def _make(user_id: str = USER_ID, username: str = "greenthumb", **fields: Any) -> Profile:
        profile = await gateway.create_profile(user_id, username, f"{username}@example.com")
        if fields:
            profile = await gateway.update_profile(user_id, fields)
        return profile

    return _make


@pytest_asyncio.fixture
async def client(seeded_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, sharing the seeded in-memory database."""
    from verdant.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_header(user_id: str = USER_ID, email: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, email)}"}


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient) -> AsyncClient:
    """Client carrying a token for USER_ID, with the profile registered."""
    client.headers.update(auth_header(USER_ID, "greenthumb@example.com"))
    response = await client.post("/api/v1/profile", json={"username": "greenthumb"})
    assert response.status_code == 201
    return client
