"""FastAPI dependency wiring the request session to a storage gateway."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from verdant.database import get_session
from verdant.storage.sql_gateway import SqlAlchemyGateway


async def get_gateway(db: AsyncSession = Depends(get_session)) -> SqlAlchemyGateway:  # noqa: B008
    """Gateway bound to the request's session; routers commit via the same session."""
    return SqlAlchemyGateway(db)
