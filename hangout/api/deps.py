"""
hangout.api.deps — FastAPI dependency injection
================================================

The identity provider issues HS256 bearer tokens whose ``sub`` claim is
the caller's opaque subject.  Routes never look at users directly; they
pass the subject to a service, which resolves it inside its own
transaction.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Header
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from hangout.database.engine import create_db_engine
from hangout.errors import Unauthenticated

_WEAK_SECRETS = frozenset({
    "hangout-dev-secret-change-me",
    "change-me",
    "changeme",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Return ``JWT_SECRET``, refusing to start on a secret we would accept
    tokens forged with.

    Rejects a missing or blank value, a known placeholder, and anything
    shorter than 32 characters.
    """
    secret = os.getenv("JWT_SECRET", "").strip()
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "It must match the identity provider's HS256 signing secret."
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(f"JWT_SECRET is a known weak default ({secret!r}).")
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short: {len(secret)} < {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


def get_subject(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """Return the bearer token's subject, or ``None`` when no token was sent.

    A missing token is left for the service to reject, so anonymous calls
    and bad tokens both surface as 401.
    """
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise Unauthenticated("Malformed authorization header")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise Unauthenticated("Invalid token") from None
    subject = payload.get("sub")
    if not subject:
        raise Unauthenticated("Token has no subject")
    return str(subject)
