"""Error taxonomy shared by the scheduling core and the HTTP layer.

Every error carries the HTTP status it is surfaced with, so route handlers
never translate them by hand; ``backend.main`` registers a single handler for
``BookingError``.
"""


class BookingError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    """Malformed input, past dates, self-booking or a disallowed status change."""
    status_code = 400
    default_message = 'Invalid request'


class NotFoundError(BookingError):
    status_code = 404
    default_message = 'Not found'


class AuthorizationError(BookingError):
    status_code = 403
    default_message = 'Access denied'


class ConflictError(BookingError):
    status_code = 409
    default_message = 'Time slot not available'


class InternalError(BookingError):
    status_code = 500
    default_message = 'Internal server error'
