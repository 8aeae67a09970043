"""FastAPI authentication dependencies."""

from __future__ import annotations

from dataclasses import dataclass

import jwt
from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from verdant.auth.jwt import verify_token

_bearer = HTTPBearer()


@dataclass(frozen=True)
class CurrentUser:
    """Identity taken from the bearer token."""

    id: str
    email: str | None = None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
) -> CurrentUser:
    """
    Extract and verify the JWT, return the caller's identity.

    The profile row is not loaded here: a user may hold a valid token before
    registering a profile. Raises 401 on an invalid token.
    """
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    return CurrentUser(id=str(payload["sub"]), email=payload.get("email"))
