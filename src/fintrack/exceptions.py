"""Typed failures raised by the finance query and record services."""

from __future__ import annotations

from typing import Any


class FinanceError(Exception):
    """Base class for failures surfaced to callers as a typed outcome."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidParameter(FinanceError):
    """Raised when numeric or date input is malformed, or a range is inverted."""

    status_code = 400


class MissingParameter(FinanceError):
    """Raised when a required request field is absent."""

    status_code = 400


class NotFound(FinanceError):
    """Raised when a record does not exist or belongs to another user."""

    status_code = 404


class StoreUnavailable(FinanceError):
    """Raised when the record store fails for any reason."""

    status_code = 503


class Unauthorized(FinanceError):
    """Raised when a request carries no valid bearer token."""

    status_code = 401
