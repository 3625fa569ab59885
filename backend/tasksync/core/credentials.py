"""Credential Verifier - signed bearer tokens shared by the request and connection channels.

Invariants:
    - verify_token is the ONLY trust root: HTTP routes and the WebSocket handshake
      both resolve an OwnerId through it, so the two channels cannot diverge
    - Pure: no IO, no clock other than the one PyJWT reads for `exp`
    - Every failure (absent, malformed, bad signature, expired, bad subject)
      raises InvalidCredentialError; callers never see PyJWT exceptions

Design Decisions:
    - HS256 JWT with `sub` = owner UUID and `exp` required
    - decode_credential exposes expiry so the connection gateway can end a
      session when its credential lapses
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from tasksync.core.domain_types import OwnerId
from tasksync.core.errors import InvalidCredentialError

DEFAULT_ALGORITHM = "HS256"
BEARER_PREFIX = "bearer"


@dataclass(frozen=True)
class Credential:
    """A verified token: who it belongs to and when it stops being valid."""
    owner_id: OwnerId
    expires_at: datetime


def issue_token(
    owner_id: OwnerId,
    secret: str,
    *,
    email: str | None = None,
    algorithm: str = DEFAULT_ALGORITHM,
    expires_in: timedelta = timedelta(days=7),
    now: datetime | None = None,
) -> str:
    """Sign a token for owner_id. Issued by login/register only."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(owner_id),
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_credential(
    token: str | None, secret: str, algorithm: str = DEFAULT_ALGORITHM,
) -> Credential:
    """Verify signature and expiry, returning the owner and expiry."""
    if not token:
        raise InvalidCredentialError("No token provided", "MISSING_CREDENTIAL")
    try:
        claims = jwt.decode(
            token, secret, algorithms=[algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidCredentialError("Token expired", "TOKEN_EXPIRED")
    except jwt.InvalidTokenError:
        raise InvalidCredentialError("Invalid token")

    try:
        owner_id = OwnerId(UUID(str(claims["sub"])))
    except ValueError:
        raise InvalidCredentialError("Invalid token subject")
    expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
    return Credential(owner_id=owner_id, expires_at=expires_at)


def verify_token(
    token: str | None, secret: str, algorithm: str = DEFAULT_ALGORITHM,
) -> OwnerId:
    """Resolve a token to its owner or raise InvalidCredentialError."""
    return decode_credential(token, secret, algorithm).owner_id


def extract_bearer_token(authorization: str | None) -> str | None:
    """Pull the token out of an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_PREFIX or not token.strip():
        return None
    return token.strip()
