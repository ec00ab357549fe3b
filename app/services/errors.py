"""Service-level error taxonomy.

Every failure raised by the service layer is one of four kinds. The API maps
them onto HTTP responses in ``app.main``; the ``presentation`` attribute tells
a client how to surface it (inline next to a field, full-screen not-found,
or a dismissable alert).
"""

from __future__ import annotations


class ServiceError(Exception):
    status_code = 500
    presentation = "alert"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "presentation": self.presentation}


class ValidationError(ServiceError):
    """A required field is missing or malformed."""

    status_code = 422
    presentation = "inline"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {**super().to_dict(), "field": self.field}


class NotFoundError(ServiceError):
    status_code = 404
    presentation = "not_found"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(ServiceError):
    """The record is in a state that does not allow the operation (e.g. double finish)."""

    status_code = 409


class TransientError(ServiceError):
    """An external collaborator failed or is unavailable; the caller may retry manually."""

    status_code = 503


class GoneError(ServiceError):
    """The resource existed but has expired or been deactivated."""

    status_code = 410
    presentation = "not_found"
