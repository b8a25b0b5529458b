"""Error taxonomy shared by the stores, the auth gate and the HTTP layer.

``InkpostError`` subclasses carry an HTTP status and a user-facing message.
They are rendered by a single exception handler registered in ``main``.
Token and configuration errors are not HTTP errors: the gate and the
lifespan translate them.
"""

from __future__ import annotations


class InkpostError(Exception):
    status_code = 500
    body_key = "message"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {self.body_key: self.message}


class ValidationError(InkpostError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(InkpostError):
    status_code = 404
    default_message = "Not found"


class Conflict(InkpostError):
    status_code = 409
    default_message = "Already exists"


class UsernameTaken(Conflict):
    default_message = "Username already taken"


class TagExists(Conflict):
    default_message = "Tag already exists"


class Unauthorized(InkpostError):
    status_code = 401
    body_key = "error"
    default_message = "Unauthorized"


class CriticalError(InkpostError):
    """Unexpected persistence failure. Details go to the log, not the client."""

    status_code = 500
    default_message = "Critical error"


class TokenError(Exception):
    pass


class ExpiredToken(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class ConfigurationError(RuntimeError):
    """Fatal misconfiguration, e.g. no JWT signing secret."""
