"""Domain error taxonomy and standardized error payloads."""

from __future__ import annotations

from typing import Any


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class DomainError(Exception):
    """Base class for client-correctable failures raised by services."""

    status_code: int = 400
    code: str = "domain_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code

    def to_payload(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details)


class ValidationError(DomainError):
    """Malformed or missing input."""

    status_code = 400
    code = "validation_error"


class NotFoundError(DomainError):
    """A referenced id does not exist."""

    status_code = 404
    code = "not_found"


class ConflictError(DomainError):
    """A referenced entity exists but is in a state that forbids the operation."""

    status_code = 409
    code = "conflict"


class PermissionDenied(DomainError):
    """Role matrix rejection; ``code`` carries the gate's reason."""

    status_code = 403
    code = "permission_denied"


class AuditFailure(DomainError):
    """Audit recording failed. Logged by the recorder, never surfaced to clients."""

    status_code = 500
    code = "audit_failure"
