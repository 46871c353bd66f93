"""
src/api/auth.py
================
Bearer-token gate for protected routes.

Used as a FastAPI dependency:

    @router.post("/products")
    async def create(..., user: Identity = Depends(require_user)): ...

The Authorization header must be exactly `Bearer <token>`. Failure reasons
are reported with distinct codes so clients can tell them apart:
    token_missing    no Authorization header
    token_malformed  not two space-separated parts, or scheme is not "Bearer"
    token_invalid    bad signature, malformed JWT, or expired
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from src.core.errors import AuthorizationError, TokenInvalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    username: str


def parse_bearer(authorization: Optional[str]) -> str:
    """Return the token part of an Authorization header value."""
    if not authorization:
        raise AuthorizationError("Missing token.", code="token_missing")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise AuthorizationError("Malformed Authorization header.", code="token_malformed")
    return parts[1]


async def require_user(
    request:       Request,
    authorization: Optional[str] = Header(default=None),
) -> Identity:
    token = parse_bearer(authorization)
    try:
        claims = request.app.state.tokens.verify(token)
    except TokenInvalid as exc:
        logger.info("Rejected token on %s %s: %s", request.method, request.url.path, exc)
        raise AuthorizationError("Invalid or expired token.", code="token_invalid") from exc

    identity           = Identity(username=claims["username"])
    request.state.user = identity
    return identity
