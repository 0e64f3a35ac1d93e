"""Error types raised by the booking backend.

Every error that should reach the client as a JSON body derives from
``BookingAppError`` and carries its HTTP status. The exception handlers in
``app.main`` turn them into ``{"message": ...}`` responses.
"""


class BookingAppError(Exception):
    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingAppError):
    status_code = 400
    default_message = "All required fields are required"


class InvalidCredentials(BookingAppError):
    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(BookingAppError):
    status_code = 401
    default_message = "No token provided"


class Forbidden(BookingAppError):
    status_code = 403
    default_message = "Invalid or expired token"


class InvalidToken(Exception):
    """Token signature, format or expiry check failed."""


class StoreUnavailable(Exception):
    """The document store could not be reached or is not configured."""
