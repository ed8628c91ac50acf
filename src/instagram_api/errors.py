"""
Exception hierarchy for the Instagram client.
"""

from typing import Any, Optional


class InstagramError(Exception):
    """Base exception for all library errors."""


class ConfigurationError(InstagramError):
    """Raised when the client is built without usable configuration."""


class StateError(InstagramError):
    """Raised when an operation needs an access token that is not set."""


class TokenExchangeError(InstagramError):
    """Raised when a token endpoint answers without an ``access_token``."""

    def __init__(self, message: str, *, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


class TransportError(InstagramError):
    """Raised when the HTTP round trip itself fails."""

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class DecodeError(InstagramError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, message: str, *, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class PaginationUnsupportedError(InstagramError):
    """Raised when a response carries no ``paging`` metadata."""


class AuthorizationDeniedError(InstagramError):
    """Raised when the OAuth redirect reports an error instead of a code."""

    def __init__(
        self,
        message: str,
        *,
        reason: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.description = description
