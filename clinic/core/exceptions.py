"""Application exceptions rendered as JSON errors by the API."""


class AppException(Exception):
    """Base application exception carrying its HTTP status code."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundException(AppException):
    """Unknown appointment, patient, professional, procedure or user."""

    status_code = 404
    default_message = "Resource not found"


class UnauthorizedException(AppException):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenException(AppException):
    """Role or ownership check failed."""

    status_code = 403
    default_message = "Forbidden"


class BadRequestException(AppException):
    status_code = 400
    default_message = "Bad request"


class InvalidTransitionException(BadRequestException):
    """Unknown status or a status change the lifecycle does not allow."""

    default_message = "Invalid status transition"


class ConflictException(AppException):
    """Request conflicts with the stored state, such as a stale version."""

    status_code = 409
    default_message = "Conflict"
