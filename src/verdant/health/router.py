"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from verdant.config import get_settings
from verdant.database import get_session
from verdant.db.models import Achievement, Badge
from verdant.game.catalog import BAD_CHOICES, GOOD_CHOICES

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe — returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> JSONResponse:
    """Readiness probe — database reachable and progression catalogs loaded.

    Choices cannot award achievements or badges until the catalogs exist,
    so an empty catalog reports degraded with 503.
    """
    checks: dict[str, str] = {}

    try:
        achievements = (await db.execute(select(func.count()).select_from(Achievement))).scalar_one()
        badges = (await db.execute(select(func.count()).select_from(Badge))).scalar_one()
        checks["database"] = "ok"
        checks["catalogs"] = "ok" if achievements and badges else "empty"
    except SQLAlchemyError as exc:
        checks["database"] = f"error: {exc.__class__.__name__}"
        checks["catalogs"] = "unknown"

    all_ok = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ready" if all_ok else "degraded", "checks": checks},
    )


@router.get("/version")
async def version() -> dict[str, str | int]:
    """Return API version, environment and the size of the choice catalog."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
        "choices": len(GOOD_CHOICES) + len(BAD_CHOICES),
    }
