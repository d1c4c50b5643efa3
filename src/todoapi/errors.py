# Error taxonomy for the todo API.
# Created: 2026-10-18
#
# Raised from dependencies and handlers; rendered to JSON by the exception
# handlers registered in todoapi.api.app.

from __future__ import annotations

from typing import Any


class TodoAPIError(Exception):
    """Base class for errors that map to a structured HTTP response."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class Unauthenticated(TodoAPIError):
    """Missing, malformed, or unverifiable bearer token."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationFailed(TodoAPIError):
    """Request body does not match the todo schema."""

    status_code = 400

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__("Validation failed")
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class NotFound(TodoAPIError):
    """No todo matches the id (and owner, where checked)."""

    status_code = 404

    def __init__(self, message: str = "Todo not found"):
        super().__init__(message)


class StoreConnectionError(RuntimeError):
    """The document store could not be reached at startup."""
