"""
HS256 JWT verification for identity-provider tokens.

Tokens are issued by the external identity provider with a shared secret.
``sub`` carries the user id (a UUID string) and ``aud`` must match the
configured audience.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from verdant.config import get_settings


def create_access_token(user_id: str, email: str | None = None, expires_minutes: int = 60) -> str:
    """
    Mint a token the way the identity provider does.

    Used by local tooling and tests; production tokens come from the provider.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a bearer token.

    Raises:
        jwt.InvalidTokenError: If the signature, expiry, or audience is invalid,
            or the ``sub`` claim is missing.
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options={"require": ["sub", "exp"]},
    )
    if not payload.get("sub"):
        raise jwt.InvalidTokenError("Token has no subject")
    return payload
