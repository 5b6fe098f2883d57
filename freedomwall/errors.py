"""Error taxonomy shared by the core and the web layer.

Every error carries the HTTP status it maps to and an optional
machine-checkable ``code``.  The web layer turns them into
``{"message": ..., "error": ...}`` JSON bodies.
"""

from __future__ import annotations


class FreedomWallError(Exception):
    """Base class for all expected application errors."""

    status_code: int = 500

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.code:
            body["error"] = self.code
        return body


class ValidationError(FreedomWallError):
    """Missing, empty, oversized or malformed input."""

    status_code = 400


class ConflictError(FreedomWallError):
    """Duplicate vote, report or like from the same caller."""

    status_code = 400


class AuthorizationError(FreedomWallError):
    """Missing or incorrect admin credentials."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", code: str = "") -> None:
        super().__init__(message, code)


class NotFoundError(FreedomWallError):
    status_code = 404


class RateLimitError(FreedomWallError):
    """Raised when a caller exceeds the limit of an action class."""

    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message, code="RATE_LIMITED")
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        return {"message": self.message, "error": self.code, "retryAfter": self.retry_after}


class InternalError(FreedomWallError):
    """Persistence failure or other unexpected condition."""

    status_code = 500
