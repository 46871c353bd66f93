"""
Unit tests for TokenService issue / verify.
Run with: pytest tests/
"""

import time

import jwt
import pytest

from src.core.errors import TokenInvalid
from src.core.tokens import TokenService


def test_issue_then_verify(tokens):
    assert tokens.verify(tokens.issue("admin")) == {"username": "admin"}


def test_expiry_is_twelve_hours(settings, tokens):
    claims = jwt.decode(tokens.issue("admin"), settings.jwt_secret, algorithms=["HS256"])
    assert claims["exp"] - claims["iat"] == 12 * 3600


def test_token_issued_in_the_past_is_expired(settings):
    past   = TokenService(settings, clock=lambda: time.time() - 13 * 3600)
    token  = past.issue("admin")

    with pytest.raises(TokenInvalid):
        TokenService(settings).verify(token)


def test_token_rejected_exactly_at_expiry(settings):
    now    = 1_700_000_000
    issuer = TokenService(settings, clock=lambda: now)
    token  = issuer.issue("admin")
    ttl    = int(settings.token_ttl.total_seconds())

    assert TokenService(settings, clock=lambda: now + ttl - 1).verify(token) == {"username": "admin"}
    with pytest.raises(TokenInvalid):
        TokenService(settings, clock=lambda: now + ttl).verify(token)


def test_tampered_payload_fails(tokens):
    header, payload, sig = tokens.issue("admin").split(".")
    forged = jwt.encode(
        {"username": "mallory", "iat": int(time.time()), "exp": int(time.time()) + 60},
        "some-other-secret-that-is-also-long-enough",
        algorithm="HS256",
    ).split(".")[1]

    with pytest.raises(TokenInvalid):
        tokens.verify(".".join([header, forged, sig]))

    flipped = payload[:-1] + ("A" if payload[-1] != "A" else "B")
    with pytest.raises(TokenInvalid):
        tokens.verify(".".join([header, flipped, sig]))


def test_wrong_secret_fails(settings, tokens):
    from dataclasses import replace

    other = TokenService(replace(settings, jwt_secret="a-completely-different-secret-of-length"))
    with pytest.raises(TokenInvalid):
        tokens.verify(other.issue("admin"))


@pytest.mark.parametrize("token", ["", "abc", "a.b.c", "Bearer x.y.z"])
def test_malformed_tokens_fail(tokens, token):
    with pytest.raises(TokenInvalid):
        tokens.verify(token)


def test_token_without_username_fails(settings, tokens):
    now   = int(time.time())
    token = jwt.encode({"iat": now, "exp": now + 60}, settings.jwt_secret, algorithm="HS256")

    with pytest.raises(TokenInvalid):
        tokens.verify(token)
