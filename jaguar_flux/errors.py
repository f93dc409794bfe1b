"""Error types raised by the Jaguar Flux client.

Every failure surfaced by the client is a ``JaguarAPIError`` so callers can
catch one type; subclasses mark the cases the retry wrapper must not retry.
"""

from __future__ import annotations

from typing import Any


class JaguarAPIError(Exception):
    """API call failed; carries the HTTP status and decoded body when known."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "status_code": self.status_code}


class JaguarValidationError(JaguarAPIError):
    """Request parameters were rejected locally, before any I/O."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Validation failed: {', '.join(errors)}")
        self.errors = list(errors)


class JaguarTimeoutError(JaguarAPIError):
    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(message, status_code=408)
