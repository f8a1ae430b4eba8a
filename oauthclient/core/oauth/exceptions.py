"""OAuth client exceptions for error handling."""
from __future__ import annotations
from typing import Optional


class OAuthClientError(Exception):
    """Base exception for all identity service operations."""
    pass


class TransportError(OAuthClientError):
    """Network or connection failure talking to the identity service.

    Attributes:
        endpoint: URL that could not be reached
    """

    def __init__(self, endpoint: str, cause: Exception):
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(f"{endpoint}: {cause}")


class DecodeError(OAuthClientError):
    """Response body is not valid JSON of the expected shape."""

    def __init__(self, message: str, body: bytes = b""):
        self.body = body
        super().__init__(message)


class RemoteError(OAuthClientError):
    """Structured error returned by the identity service.

    Attributes:
        status_code: HTTP status code
        message: Error message from response
        error_code: Classification tag (e.g. "wrong_username_password"), if any
    """

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        prefix = f"[{status_code}]"
        if error_code:
            prefix = f"{prefix} {error_code}"
        super().__init__(f"{prefix}: {message}")


class ConfigurationError(OAuthClientError):
    """Client is missing configuration or the token URL has an unusable shape."""
    pass
