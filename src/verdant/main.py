"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from verdant.config import get_settings
from verdant.database import close_db, create_tables, get_session, init_db
from verdant.game.router import router as game_router
from verdant.game.seed import seed_catalogs
from verdant.health.router import router as health_router
from verdant.middleware import setup_middleware
from verdant.social.router import router as social_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)

    # Postgres schema is managed by Alembic; SQLite (dev/test) is created from metadata
    if settings.database_url.startswith("sqlite"):
        await create_tables()

    if settings.seed_catalogs:
        try:
            async for db in get_session():
                await seed_catalogs(db)
                break
        except SQLAlchemyError:
            logger.warning("Catalog seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Verdant API",
        description="Backend API for Verdant, an eco-habit tracker that grows a virtual plant",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(game_router)
    app.include_router(social_router)

    return app


app = create_app()
