"""Domain error types raised by services and rendered by the API exception handlers."""


class ServiceError(Exception):
    """Base class for errors that map to a client-visible HTTP status and message."""

    status_code: int = 400

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class ValidationError(ServiceError):
    """Missing or malformed input."""

    status_code = 400


class AuthenticationError(ServiceError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class PermissionDeniedError(ServiceError):
    """Caller is identified but not allowed to perform the operation."""

    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """Entity already exists (duplicate registration, duplicate submission)."""

    status_code = 400


class InvalidStateError(ServiceError):
    """Operation not permitted given the entity's current state."""

    status_code = 400


class PayloadTooLargeError(ServiceError):
    status_code = 413


class ServiceFailure(ServiceError):
    """
    Unexpected failure with a client-facing message.

    The cause is logged server-side; its text is echoed only outside production.
    """

    status_code = 500
