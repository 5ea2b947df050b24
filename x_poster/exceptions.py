"""
Domain specific exception hierarchy for the x_poster package.
"""

class XClientError(Exception):
    """Base exception for all library errors."""


class ValidationError(XClientError):
    """Raised before any network call when local input is unusable."""


class ConfigurationError(ValidationError):
    """Raised when required configuration or credentials are missing."""


class MediaValidationError(ValidationError):
    """Raised when local media files do not satisfy upload requirements."""


class ThreadTooLong(ValidationError):
    """Raised when a thread holds more messages than the platform accepts."""

    def __init__(self, message: str, *, length: int, limit: int) -> None:
        super().__init__(message)
        self.length = length
        self.limit = limit


class RateLimitExceeded(XClientError):
    """Raised when the client-side request window is exhausted."""

    def __init__(self, message: str, *, reset_at: float | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class TransportError(XClientError):
    """Raised when the HTTP exchange fails below the protocol level."""


class ApiResponseError(XClientError):
    """Raised when the X API answers with a non-2xx status."""

    def __init__(self, message: str, *, code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.body = body


class DecodeError(XClientError):
    """Raised when a response body cannot be decoded."""


class RequestFailed(XClientError):
    """Raised when every attempt of an API request has failed."""

    def __init__(self, message: str, *, last_error: XClientError, attempts: int) -> None:
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


class AuthenticationError(XClientError):
    """Raised when authentication flow fails or tokens are invalid."""


class HandshakeError(AuthenticationError):
    """Raised when an OAuth token endpoint answers with a non-2xx status."""

    def __init__(self, message: str, *, code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.body = body


class ProtocolError(AuthenticationError):
    """Raised when an OAuth token endpoint response lacks a required field."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class TokenMismatchError(ProtocolError):
    """Raised when the callback token differs from the stored request token."""


class UploadFailed(XClientError):
    """Raised when the media endpoint does not return a media id."""
