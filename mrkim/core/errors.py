"""Errors raised by the auth flows.

Each error carries the HTTP status and the user-facing message it is
reported with. They are converted to ``{"detail": message}`` responses by
the handler registered in ``mrkim.main``.
"""


class AuthError(Exception):
    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """A required field is missing or malformed."""
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(AuthError):
    status_code = 404
    default_message = "User not found"


class ConflictError(AuthError):
    status_code = 409
    default_message = "Already verified"


class InvalidOrExpiredError(AuthError):
    """No active OTP matched. Wrong, expired and already used look the same."""
    status_code = 400
    default_message = "Invalid or expired OTP"


class InvalidCodeError(AuthError):
    status_code = 400
    default_message = "Invalid OTP"


class InvalidCredentialsError(AuthError):
    status_code = 401
    default_message = "Invalid credentials"


class ForbiddenError(AuthError):
    status_code = 403
    default_message = "Forbidden"
