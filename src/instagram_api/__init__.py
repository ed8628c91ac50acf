"""
instagram_api: Instagram Graph API client for OAuth, tokens, profile and media.
"""

from .auth import authenticate, build_authorization_url, parse_redirect
from .client import InstagramClient
from .errors import (
    AuthorizationDeniedError,
    ConfigurationError,
    DecodeError,
    InstagramError,
    PaginationUnsupportedError,
    StateError,
    TokenExchangeError,
    TransportError,
)
from .types import ClientConfig, FieldSelector

__all__ = [
    "AuthorizationDeniedError",
    "ClientConfig",
    "ConfigurationError",
    "DecodeError",
    "FieldSelector",
    "InstagramClient",
    "InstagramError",
    "PaginationUnsupportedError",
    "StateError",
    "TokenExchangeError",
    "TransportError",
    "authenticate",
    "build_authorization_url",
    "parse_redirect",
]
__version__ = "0.1.0"
