"""
Application error taxonomy.

Services raise these; the handlers registered in `main.py` turn every one of
them into a `{"error": message}` JSON body with the class's status code.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Authentication required"


class TokenRejected(Unauthenticated):
    """Token present but malformed, expired or wrongly signed."""
    status_code = 403
    default_message = "Invalid or expired token"


class Forbidden(AppError):
    status_code = 403
    default_message = "Access denied"


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid email or password."


class Conflict(AppError):
    status_code = 409
    default_message = "Email already registered."


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidSubject(ValidationError):
    default_message = "Invalid subject."


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class RateLimited(AppError):
    status_code = 429
    default_message = "Rate limit exceeded"


class InternalError(AppError):
    pass
