"""
Error taxonomy shared by the service layer and the HTTP surface.

Every error carries the status code it maps to, so route handlers can let
them propagate and the app-level handler shapes the JSON response.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


class PortfolioError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"message": self.message}


class ValidationError(PortfolioError):
    """Malformed or out-of-range input, with optional field-level detail."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[list[dict]] = None,
    ):
        super().__init__(message)
        self.errors = errors or []

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class InvalidFileType(ValidationError):
    default_message = "Unsupported file type"


class FileTooLarge(ValidationError):
    default_message = "File too large"


class TooManyFiles(ValidationError):
    default_message = "Too many files"


class MissingFile(ValidationError):
    default_message = "No file uploaded"


class Unauthorized(PortfolioError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(PortfolioError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PortfolioError):
    status_code = 404
    default_message = "Not found"


class StorageInconsistency(NotFound):
    """A record references an asset whose bytes are missing from storage."""

    default_message = "File not found on server"


class RateLimited(PortfolioError):
    status_code = 429
    default_message = "Too many requests, please try again later."


def field_errors(raw_errors: Iterable[dict[str, Any]]) -> list[dict]:
    """Flatten pydantic error dicts into ``{field, message}`` pairs."""
    flattened = []
    for error in raw_errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        flattened.append(
            {"field": ".".join(loc), "message": error.get("msg", "Invalid value")}
        )
    return flattened
