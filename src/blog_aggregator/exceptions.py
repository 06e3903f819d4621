"""
Error taxonomy shared by the request handlers, the auth gate and the scheduler.

Every error carries the HTTP status it maps to and a message that is safe to
show to API clients. Underlying storage details are logged, never attached.
"""


class AggregatorError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, message: str = "Internal Server Error", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ClientInputError(AggregatorError):
    """Malformed body or invalid parameter."""

    status_code = 400


class AuthError(AggregatorError):
    """Missing or invalid credential."""

    status_code = 401


class MissingCredentialError(AuthError):
    """No API key was presented."""

    def __init__(self, message: str = "Missing API key"):
        super().__init__(message)


class InvalidCredentialError(AuthError):
    """The presented API key does not belong to any user."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message)


class NotFoundError(AggregatorError):
    status_code = 404


class MethodError(AggregatorError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed"):
        super().__init__(message)


class StorageError(AggregatorError):
    """Any persistence failure. The message is always generic."""

    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__(message)


__all__ = [
    "AggregatorError",
    "ClientInputError",
    "AuthError",
    "MissingCredentialError",
    "InvalidCredentialError",
    "NotFoundError",
    "MethodError",
    "StorageError",
]
