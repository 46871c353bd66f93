"""
src/core/tokens.py
===================
TokenService: stateless HS256 JWT session tokens.

Claims:
    username  the authenticated account
    sub       same value, standard JWT subject
    iat       issue time (epoch seconds)
    exp       iat + Settings.token_ttl

There is no server-side session table and no revocation list: a token stays
valid until exp, even across password changes. Expiry is compared against
this service's clock (injectable for tests) with no leeway: a token is
rejected once now >= exp.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import jwt

from src.core.config import Settings
from src.core.errors import TokenInvalid

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenService:

    def __init__(self, settings: Settings, clock: Callable[[], float] = time.time) -> None:
        self._secret = settings.jwt_secret
        self._ttl    = int(settings.token_ttl.total_seconds())
        self._clock  = clock

    def issue(self, username: str) -> str:
        now = int(self._clock())
        payload = {
            "username": username,
            "sub":      username,
            "iat":      now,
            "exp":      now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> dict:
        """
        Return {"username": ...} for a valid token.

        Raises TokenInvalid on a bad signature, a malformed token, missing
        claims, or an expired token.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={
                    "require":    ["exp", "iat"],
                    # expiry is checked below against our own clock
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(str(exc)) from exc

        username = claims.get("username")
        exp      = claims.get("exp")
        if not isinstance(username, str) or not username:
            raise TokenInvalid("token has no username")
        if not isinstance(exp, (int, float)):
            raise TokenInvalid("token has no numeric exp")
        if self._clock() >= exp:
            raise TokenInvalid("token expired")

        return {"username": username}
