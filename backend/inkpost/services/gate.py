"""Authorization gate for administrative routes.

Turns the raw ``Authorization`` header into a decision. A request starts
unauthenticated and is admitted only if the bearer token verifies; every
failure is a terminal rejection for that request. ``check`` never raises:
token and configuration errors become rejections.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from inkpost.errors import ConfigurationError, ExpiredToken, TokenError
from inkpost.services.tokens import TokenClaims, TokenService

logger = logging.getLogger(__name__)

MSG_UNAUTHORIZED = "Unauthorized"
MSG_MISSING_TOKEN = "Missing token"
MSG_INVALID_TOKEN = "Invalid or expired token"
MSG_INTERNAL = "Internal server error"


class GuardMode(str, Enum):
    ENFORCED = "enforced"
    BYPASSED = "bypassed"  # test harnesses only


class GateState(str, Enum):
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class GateDecision:
    state: GateState
    claims: TokenClaims | None = None
    status_code: int = 200
    reason: str = ""

    @property
    def admitted(self) -> bool:
        return self.state is GateState.AUTHENTICATED

    @classmethod
    def admit(cls, claims: TokenClaims | None) -> GateDecision:
        return cls(state=GateState.AUTHENTICATED, claims=claims)

    @classmethod
    def reject(cls, reason: str, status_code: int = 401) -> GateDecision:
        return cls(state=GateState.REJECTED, status_code=status_code, reason=reason)


class AuthGate:
    """Verifies bearer tokens for protected routes."""

    __slots__ = ("token_service", "mode")

    def __init__(
        self,
        token_service: TokenService,
        mode: GuardMode = GuardMode.ENFORCED,
    ) -> None:
        self.token_service = token_service
        self.mode = mode
        if mode is GuardMode.BYPASSED:
            logger.warning(
                "Authorization gate is BYPASSED, protected routes are open. "
                "This mode is for test harnesses only."
            )

    def check(self, authorization: str | None) -> GateDecision:
        if self.mode is GuardMode.BYPASSED:
            return GateDecision.admit(None)

        if not authorization:
            return self._reject(MSG_UNAUTHORIZED, "no Authorization header")

        parts = authorization.split()
        if len(parts) < 2:
            return self._reject(MSG_MISSING_TOKEN, "no token after scheme")
        scheme, token = parts[0], parts[1]
        if scheme.lower() != "bearer":
            return self._reject(MSG_UNAUTHORIZED, f"unsupported scheme {scheme!r}")

        try:
            claims = self.token_service.verify(token)
        except ExpiredToken:
            return self._reject(MSG_INVALID_TOKEN, "token expired")
        except TokenError:
            return self._reject(MSG_INVALID_TOKEN, "token failed verification")
        except ConfigurationError:
            logger.critical("Cannot verify tokens: JWT_SECRET is not configured")
            return GateDecision.reject(MSG_INTERNAL, status_code=500)

        return GateDecision.admit(claims)

    @staticmethod
    def _reject(message: str, log_detail: str) -> GateDecision:
        logger.info("Rejected request: %s", log_detail)
        return GateDecision.reject(message)
