"""Error taxonomy shared by every service.

Each error carries a stable ``kind`` and the HTTP status it maps to; the
exception handlers in ``main`` render them as ``{"error": kind, "message": ...}``.
"""
from typing import Optional


class AppError(Exception):
    kind = "internal_error"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid input"


class AuthError(AppError):
    kind = "auth_error"
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(AppError):
    kind = "forbidden"
    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    kind = "conflict"
    status_code = 409
    default_message = "Resource already exists"


class InvalidStateError(AppError):
    kind = "invalid_state"
    status_code = 400
    default_message = "Action not allowed in the current state"


class InternalError(AppError):
    pass
