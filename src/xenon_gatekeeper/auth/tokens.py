"""Bearer token decoding and issuing.

Tokens are signed JWTs issued by the identity provider; their payload is
the claim set read by ``auth.claims``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from xenon_gatekeeper.config import Settings

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """Verify signature and expiry, return the claim set.

    Raises:
        jwt.InvalidTokenError: on bad signature, expiry, or audience.
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    return jwt.decode(
        token,
        settings.jwt_secret.get_secret_value(),
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options=options,
    )


def create_access_token(
    claims: Mapping[str, Any],
    settings: Settings,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Sign a token carrying *claims*. Used by scripts and tests."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {**claims, "iat": now, "exp": now + expires_in}
    if settings.jwt_audience is not None:
        payload.setdefault("aud", settings.jwt_audience)
    return jwt.encode(
        payload,
        settings.jwt_secret.get_secret_value(),
        algorithm=settings.jwt_algorithm,
    )
