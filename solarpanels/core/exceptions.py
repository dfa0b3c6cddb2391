"""
Domain errors. Each class is one stable error kind with its HTTP status.
Services raise these; main.py renders them as {"error": kind, "detail": ...}.
"""


class ServiceError(Exception):
    """Base for all classified failures."""

    kind = "internal"
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(ServiceError):
    kind = "unauthenticated"
    status_code = 401
    default_detail = "Not authenticated"


class Forbidden(ServiceError):
    kind = "forbidden"
    status_code = 403
    default_detail = "Access denied"


class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404
    default_detail = "Not found"


class Conflict(ServiceError):
    kind = "conflict"
    status_code = 409
    default_detail = "Conflict with current state"


class BadRequest(ServiceError):
    kind = "bad_request"
    status_code = 400
    default_detail = "Invalid input"


class InternalError(ServiceError):
    pass


class CalculationServiceError(Exception):
    """Transport failure or non-200 answer from the power calculation service."""
