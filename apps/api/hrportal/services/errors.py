"""
Service-layer errors.

Each error carries the HTTP status it maps to and a message that is safe to
show to the end user. Routers let these propagate; ``hrportal.main`` turns
them into JSON responses.
"""

from typing import Optional


class ServiceError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def payload(self) -> dict:
        return {"detail": self.message}


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Invalid input"


class AuthenticationError(ServiceError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(AuthenticationError):
    # identical for unknown email and wrong password
    default_message = "Invalid email or password"


class TwoFactorRequired(AuthenticationError):
    default_message = "Two-factor authentication code required"

    def payload(self) -> dict:
        return {"detail": self.message, "two_factor_required": True}


class InvalidTwoFactorCode(ValidationError):
    default_message = "Invalid verification code"


class TokenExpiredOrInvalid(ValidationError):
    default_message = "Invalid or expired reset link"


class AuthorizationError(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    status_code = 409
    default_message = "Conflict"


class AlreadyEnabled(ConflictError):
    default_message = "2FA is already enabled"


class NotEnabled(ConflictError):
    default_message = "2FA is not enabled"


class RateLimited(ServiceError):
    status_code = 429
    default_message = "Too many attempts. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message or f"Too many login attempts. Please try again in {retry_after} seconds.")

    def payload(self) -> dict:
        return {"detail": self.message, "retry_after": self.retry_after}


class InvariantViolation(ServiceError):
    status_code = 500
    default_message = "Internal data inconsistency"
