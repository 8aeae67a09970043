"""HTTP API tests — httpx AsyncClient over ASGITransport."""

from __future__ import annotations

from unittest.mock import AsyncMock

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import OTHER_USER_ID, USER_ID, auth_header
from verdant.config import get_settings
from verdant.errors import StorageUnavailableError


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_readiness(self, client: AsyncClient) -> None:
        response = await client.get("/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"] == "ok"

    @pytest.mark.asyncio
    async def test_version(self, client: AsyncClient) -> None:
        response = await client.get("/version")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "0.1.0"
        assert data["environment"] == "test"
        assert data["choices"] > 0

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-Id": "abc-123"})
        assert response.headers["X-Request-Id"] == "abc-123"

    @pytest.mark.asyncio
    async def test_malformed_request_id_replaced(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-Id": "not a valid id!"})
        request_id = response.headers["X-Request-Id"]
        assert request_id != "not a valid id!"
        assert len(request_id) == 32

    @pytest.mark.asyncio
    async def test_response_time_header(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/catalog/choices")
        assert response.headers["X-Response-Time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_readiness_degraded_without_catalogs(self, db_session: AsyncSession) -> None:
        from verdant.main import create_app

        transport = ASGITransport(app=create_app())
        async with AsyncClient(transport=transport, base_url="http://test") as unseeded:
            response = await unseeded.get("/ready")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"] == {"database": "ok", "catalogs": "empty"}


class TestCatalog:
    @pytest.mark.asyncio
    async def test_choices(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/catalog/choices")
        assert response.status_code == 200
        data = response.json()
        assert len(data["good"]) == 12
        assert len(data["bad"]) == 10
        assert data["good"][0]["id"] == "recycle"

    @pytest.mark.asyncio
    async def test_stages(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/catalog/stages")
        stages = response.json()["stages"]
        assert [s["stage"] for s in stages] == ["seedling", "sprout", "sapling", "tree", "ancient"]


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/profile")
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_bad_signature(self, client: AsyncClient) -> None:
        token = jwt.encode(
            {"sub": USER_ID, "aud": "authenticated"}, "wrong-secret-of-sufficient-length-123", algorithm="HS256"
        )
        response = await client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_audience(self, client: AsyncClient) -> None:
        settings = get_settings()
        token = jwt.encode({"sub": USER_ID, "aud": "anon", "exp": 4102444800}, settings.jwt_secret, algorithm="HS256")
        response = await client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestProfile:
    @pytest.mark.asyncio
    async def test_profile_before_register(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/profile", headers=auth_header())
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_register_and_fetch(self, authed_client: AsyncClient) -> None:
        response = await authed_client.get("/api/v1/profile")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == USER_ID
        assert data["username"] == "greenthumb"
        assert data["health"] == 50
        assert data["plant_stage"] == "seedling"

    @pytest.mark.asyncio
    async def test_register_twice_returns_existing(self, authed_client: AsyncClient) -> None:
        response = await authed_client.post("/api/v1/profile", json={"username": "greenthumb"})
        assert response.status_code == 200
        assert response.json()["id"] == USER_ID

    @pytest.mark.asyncio
    async def test_username_taken(self, authed_client: AsyncClient) -> None:
        response = await authed_client.post(
            "/api/v1/profile", json={"username": "greenthumb"}, headers=auth_header(OTHER_USER_ID)
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_username(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/profile", json={"username": "a b"}, headers=auth_header())
        assert response.status_code == 422


class TestChoices:
    @pytest.mark.asyncio
    async def test_good_choice(self, authed_client: AsyncClient) -> None:
        response = await authed_client.post("/api/v1/choices", json={"choice_id": "recycle", "is_good": True})
        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["health"] == 55
        assert data["profile"]["good_choices"] == 1
        assert data["profile"]["streak_days"] == 1
        # first_step pays 10 XP on top of the choice
        assert data["profile"]["total_xp"] == 20
        assert data["action"]["choice_id"] == "recycle"
        assert data["action"]["xp_earned"] == 10
        assert any(n["type"] == "achievement" for n in data["notifications"])

    @pytest.mark.asyncio
    async def test_bad_choice(self, authed_client: AsyncClient) -> None:
        response = await authed_client.post("/api/v1/choices", json={"choice_id": "plasticbag", "is_good": False})
        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["health"] == 45
        assert data["profile"]["total_xp"] == 0
        assert data["notifications"] == []

    @pytest.mark.asyncio
    async def test_unknown_choice(self, authed_client: AsyncClient) -> None:
        response = await authed_client.post("/api/v1/choices", json={"choice_id": "teleport", "is_good": True})
        assert response.status_code == 400

        actions = await authed_client.get("/api/v1/actions")
        assert actions.json()["actions"] == []

    @pytest.mark.asyncio
    async def test_choice_without_profile(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/choices", json={"choice_id": "recycle", "is_good": True}, headers=auth_header()
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_choices_persist(self, authed_client: AsyncClient) -> None:
        for choice_id in ["recycle", "compost"]:
            await authed_client.post("/api/v1/choices", json={"choice_id": choice_id, "is_good": True})
        await authed_client.post("/api/v1/choices", json={"choice_id": "standby", "is_good": False})

        actions = (await authed_client.get("/api/v1/actions?limit=2")).json()["actions"]
        assert [a["choice_id"] for a in actions] == ["standby", "compost"]

        daily = (await authed_client.get("/api/v1/stats/daily?days=7")).json()
        assert daily["days"] == 7
        assert daily["stats"][0]["good_count"] == 2
        assert daily["stats"][0]["bad_count"] == 1

        categories = (await authed_client.get("/api/v1/stats/categories")).json()
        assert categories["recycling"] == 2
        assert categories["energy_saving"] == 1

        challenges = (await authed_client.get("/api/v1/challenges")).json()["challenges"]
        assert len(challenges) == 3
        assert all(c["progress"] == 2 for c in challenges)

    @pytest.mark.asyncio
    async def test_dashboard(self, authed_client: AsyncClient) -> None:
        await authed_client.post("/api/v1/choices", json={"choice_id": "recycle", "is_good": True})

        response = await authed_client.get("/api/v1/profile/dashboard")
        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["health"] == 55
        assert data["progress"]["level"] == 1
        assert data["progress"]["xp_into_level"] == 20
        assert len(data["recent_actions"]) == 1
        assert data["category_stats"]["recycling"] == 1
        assert data["unread_notifications"] == 1


class TestProgressionCatalogs:
    @pytest.mark.asyncio
    async def test_achievements_flag_earned(self, authed_client: AsyncClient) -> None:
        await authed_client.post("/api/v1/choices", json={"choice_id": "recycle", "is_good": True})

        data = (await authed_client.get("/api/v1/achievements")).json()
        earned = [a["code"] for a in data["achievements"] if a["earned"]]
        assert earned == ["first_step"]
        assert data["total_earned"] == 1
        assert data["total_available"] == 9

    @pytest.mark.asyncio
    async def test_badges_listed(self, authed_client: AsyncClient) -> None:
        data = (await authed_client.get("/api/v1/badges")).json()
        assert data["total_available"] == 9
        assert data["total_earned"] == 0

    @pytest.mark.asyncio
    async def test_open_challenges_before_first_choice(self, authed_client: AsyncClient) -> None:
        challenges = (await authed_client.get("/api/v1/challenges")).json()["challenges"]
        assert {c["code"] for c in challenges} == {"daily_five", "green_week", "eco_marathon"}
        assert all(c["progress"] == 0 for c in challenges)


class TestNotifications:
    @pytest.mark.asyncio
    async def test_list_and_mark_read(self, authed_client: AsyncClient) -> None:
        await authed_client.post("/api/v1/choices", json={"choice_id": "recycle", "is_good": True})

        data = (await authed_client.get("/api/v1/notifications")).json()
        assert data["unread_count"] == 1
        note_id = data["notifications"][0]["id"]

        response = await authed_client.post(f"/api/v1/notifications/{note_id}/read")
        assert response.status_code == 200

        unread = (await authed_client.get("/api/v1/notifications?unread_only=true")).json()
        assert unread["notifications"] == []
        assert unread["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_mark_missing_notification(self, authed_client: AsyncClient) -> None:
        response = await authed_client.post("/api/v1/notifications/9999/read")
        assert response.status_code == 404


class TestStorageOutage:
    @pytest.mark.asyncio
    async def test_choice_during_outage_returns_503(self, authed_client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(
            "verdant.game.router.make_choice",
            AsyncMock(side_effect=StorageUnavailableError("append_action", "connection refused")),
        )
        response = await authed_client.post("/api/v1/choices", json={"choice_id": "recycle", "is_good": True})
        assert response.status_code == 503
        assert response.json() == {"detail": "Storage temporarily unavailable"}

        profile = (await authed_client.get("/api/v1/profile")).json()
        assert profile["health"] == 50
