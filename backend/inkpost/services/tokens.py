"""Token service — stateless, signed, time-limited bearer tokens.

Tokens are HS256 JWTs carrying the user's id, login and admin flag plus a
random token id. Nothing is persisted: a token is valid while its signature
matches the process secret and the current time is before ``exp``. There is
no revocation list, so a leaked token stays usable until it expires.

The admin flag is signed but not encrypted. Anyone holding the token can
read it; tokens are meant to travel only between their bearer and the API.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from jose import JWTError, jwt

from inkpost.errors import ConfigurationError, ExpiredToken, MalformedToken

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(minutes=15)

_REQUIRED_CLAIMS = ("userId", "username", "isAdmin", "tokenId", "iat", "exp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Decoded, verified token payload."""
    user_id: int
    username: str
    is_admin: bool
    token_id: str
    issued_at: datetime
    expires_at: datetime

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "username": self.username,
            "isAdmin": self.is_admin,
            "tokenId": self.token_id,
            "issuedAt": self.issued_at.isoformat(),
            "expiresAt": self.expires_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    claims: TokenClaims

    @property
    def expires_in(self) -> int:
        return int((self.claims.expires_at - self.claims.issued_at).total_seconds())


class TokenService:
    """Issues and verifies bearer tokens with one read-only signing secret."""

    __slots__ = ("_secret", "ttl", "_clock")

    def __init__(
        self,
        secret: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret = secret.strip() if secret else ""
        self.ttl = ttl
        self._clock = clock

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError(
                "JWT_SECRET is not set; tokens can be neither issued nor verified"
            )

    def issue(self, user_id: int, username: str, is_admin: bool = False) -> IssuedToken:
        self.ensure_configured()
        # JWT timestamps are whole seconds; truncate so the returned claims
        # equal what verify() will decode.
        now = self._clock().replace(microsecond=0)
        claims = TokenClaims(
            user_id=user_id,
            username=username,
            is_admin=is_admin,
            token_id=str(uuid4()),
            issued_at=now,
            expires_at=now + self.ttl,
        )
        payload = {
            "userId": claims.user_id,
            "username": claims.username,
            "isAdmin": claims.is_admin,
            "tokenId": claims.token_id,
            "iat": int(claims.issued_at.timestamp()),
            "exp": int(claims.expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)
        return IssuedToken(token=token, claims=claims)

    def verify(self, token: str) -> TokenClaims:
        """Check signature, structure and expiry.

        Raises ExpiredToken once ``now >= exp``, MalformedToken for a bad
        signature or payload, ConfigurationError without a secret.
        """
        self.ensure_configured()
        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JWTError as exc:
            raise MalformedToken(str(exc)) from exc

        claims = self._claims_from_payload(payload)
        if self._clock() >= claims.expires_at:
            raise ExpiredToken(f"token {claims.token_id} expired at {claims.expires_at.isoformat()}")
        return claims

    @staticmethod
    def _claims_from_payload(payload: dict) -> TokenClaims:
        missing = [name for name in _REQUIRED_CLAIMS if name not in payload]
        if missing:
            raise MalformedToken(f"token payload missing {', '.join(missing)}")

        user_id = payload["userId"]
        username = payload["username"]
        is_admin = payload["isAdmin"]
        if (
            not isinstance(user_id, int)
            or isinstance(user_id, bool)
            or not isinstance(username, str)
            or not isinstance(is_admin, bool)
        ):
            raise MalformedToken("token payload has wrong claim types")

        try:
            issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (TypeError, ValueError, OverflowError) as exc:
            raise MalformedToken("token timestamps are invalid") from exc

        return TokenClaims(
            user_id=user_id,
            username=username,
            is_admin=is_admin,
            token_id=str(payload["tokenId"]),
            issued_at=issued_at,
            expires_at=expires_at,
        )
