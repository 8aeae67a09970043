"""Global error handlers — consistent JSON error responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from verdant.errors import (
    FriendshipError,
    FriendshipNotFoundError,
    ProfileNotFoundError,
    StorageUnavailableError,
    UnknownChoiceError,
    UsernameTakenError,
)

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(UnknownChoiceError)
    async def unknown_choice_handler(_request: Request, exc: UnknownChoiceError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ProfileNotFoundError)
    async def profile_not_found_handler(_request: Request, exc: ProfileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "Profile not found"})

    @app.exception_handler(FriendshipNotFoundError)
    async def friendship_not_found_handler(_request: Request, exc: FriendshipNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(FriendshipError)
    async def friendship_error_handler(_request: Request, exc: FriendshipError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(UsernameTakenError)
    async def username_taken_handler(_request: Request, exc: UsernameTakenError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError) -> JSONResponse:
        logger.warning(
            "storage_unavailable",
            path=request.url.path,
            operation=exc.operation,
            reason=exc.reason,
        )
        return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions — always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
