"""
Error taxonomy shared by the stores, the HTTP layer and the API client.

Each error carries the HTTP status it maps to, so the API layer can turn
any of them into ``{"message": ...}`` without a lookup table, and the
client can rebuild the same type from a response status.
"""
from __future__ import annotations


class PerkHubError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PerkHubError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(PerkHubError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(PerkHubError):
    status_code = 403
    default_message = "Not allowed"


class NotFound(PerkHubError):
    status_code = 404
    default_message = "Not found"


class ConflictError(PerkHubError):
    status_code = 409
    default_message = "Conflict"


class InternalError(PerkHubError):
    status_code = 500


_BY_STATUS = {
    cls.status_code: cls
    for cls in (ValidationError, AuthError, Forbidden, NotFound, ConflictError)
}


def error_for_status(status_code: int, message: str | None = None) -> PerkHubError:
    """Rebuild the typed error for an HTTP error status."""
    if status_code == 422:
        return ValidationError(message)
    cls = _BY_STATUS.get(status_code, InternalError)
    return cls(message)
