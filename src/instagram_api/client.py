"""
Instagram API Client
Token exchange, profile, media, children and cursor pagination.
"""

import argparse
import json
import logging
import os
import re
import sys
import threading
import urllib.parse
from collections.abc import Mapping
from typing import Any, Iterator, Optional, Sequence, Union

import requests

from .auth import build_authorization_url, extract_access_token
from .errors import (
    ConfigurationError,
    DecodeError,
    InstagramError,
    PaginationUnsupportedError,
    StateError,
    TokenExchangeError,
    TransportError,
)
from .types import (
    API_URL,
    API_VERSION,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_SCOPES,
    DEFAULT_TIMEOUT_MS,
    EXCHANGE_TOKEN_URL,
    PAGINATION_KEYS,
    REFRESH_TOKEN_URL,
    TOKEN_URL,
    ClientConfig,
    FieldSelector,
)

_logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+(\.\d+)?$")
_TOKEN_IN_QUERY = re.compile(r"(access_token=)[^&\s'\")]+")


def _redact(text: str, token: Optional[str]) -> str:
    """Mask the access token wherever it shows up in ``text``."""
    text = _TOKEN_IN_QUERY.sub(r"\1***", text)
    if token:
        text = text.replace(token, "***")
    return text


_CONFIG_KEYS = {
    "app_id": ("app_id", "appId"),
    "app_secret": ("app_secret", "appSecret"),
    "redirect_uri": ("redirect_uri", "redirectUri"),
}


def _config_from_mapping(data: Mapping) -> ClientConfig:
    values = {}
    for name, aliases in _CONFIG_KEYS.items():
        for alias in aliases:
            if alias in data:
                values[name] = data[alias]
                break
        else:
            raise ConfigurationError(f"Configuration is missing '{name}'")
    return ClientConfig(**values)


class InstagramClient:
    """Instagram Graph API client.

    Built either from a ``ClientConfig`` (app id, secret and redirect URI) to
    run the OAuth flow, or from a bare access token to resume a session.
    An empty token string is rejected with ``ConfigurationError`` like a
    missing config; pass ``access_token=`` to combine both.
    """

    def __init__(
        self,
        config: Union[ClientConfig, Mapping, str, None] = None,
        *,
        access_token: Optional[str] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
        verify_tls: bool = True,
    ):
        self._config: Optional[ClientConfig] = None
        self._access_token: Optional[str] = None
        self._token_lock = threading.Lock()

        if isinstance(config, ClientConfig):
            self._config = config
        elif isinstance(config, Mapping):
            self._config = _config_from_mapping(config)
        elif isinstance(config, str) and config:
            self._access_token = config
        else:
            raise ConfigurationError(
                "Client needs an app configuration or an access token"
            )

        if access_token is not None:
            self._access_token = access_token

        self._fields = FieldSelector()
        self.timeout_ms = timeout_ms
        self.connect_timeout_ms = connect_timeout_ms
        self.verify_tls = verify_tls

    # ── Settings ──────────────────────────────────────────

    @property
    def config(self) -> Optional[ClientConfig]:
        return self._config

    @property
    def access_token(self) -> Optional[str]:
        with self._token_lock:
            return self._access_token

    @access_token.setter
    def access_token(self, token: Optional[str]) -> None:
        with self._token_lock:
            self._access_token = token

    @property
    def fields(self) -> FieldSelector:
        return self._fields

    @property
    def user_fields(self) -> str:
        return self._fields.user_fields

    @user_fields.setter
    def user_fields(self, fields: str) -> None:
        self._fields.user_fields = fields

    @property
    def media_fields(self) -> str:
        return self._fields.media_fields

    @media_fields.setter
    def media_fields(self, fields: str) -> None:
        self._fields.media_fields = fields

    @property
    def media_children_fields(self) -> str:
        return self._fields.media_children_fields

    @media_children_fields.setter
    def media_children_fields(self, fields: str) -> None:
        self._fields.media_children_fields = fields

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @timeout_ms.setter
    def timeout_ms(self, value: int) -> None:
        if value <= 0:
            raise ConfigurationError("timeout_ms must be positive")
        self._timeout_ms = value

    @property
    def connect_timeout_ms(self) -> int:
        return self._connect_timeout_ms

    @connect_timeout_ms.setter
    def connect_timeout_ms(self, value: int) -> None:
        if value <= 0:
            raise ConfigurationError("connect_timeout_ms must be positive")
        self._connect_timeout_ms = value

    def _require_config(self, operation: str) -> ClientConfig:
        if self._config is None:
            raise ConfigurationError(
                f"{operation} needs app_id, app_secret and redirect_uri"
            )
        return self._config

    def _require_token(self, operation: str) -> str:
        token = self.access_token
        if not token:
            raise StateError(f"No access token set, {operation} needs one")
        return token

    # ── Dispatch ──────────────────────────────────────────

    def _request(
        self, endpoint: str, params: Optional[Mapping] = None, method: str = "GET"
    ) -> Any:
        if endpoint.startswith("https://"):
            url = endpoint
        else:
            url = f"{API_URL}{API_VERSION}/{endpoint}"

        params = dict(params or {})
        kwargs: dict[str, Any] = {}
        if method == "GET":
            token = self.access_token
            if token:
                params["access_token"] = token
            kwargs["params"] = params
        else:
            kwargs["data"] = params

        _logger.debug(
            "%s %s params=%s",
            method,
            url,
            sorted(k for k in params if k != "access_token"),
        )

        try:
            resp = requests.request(
                method,
                url,
                timeout=(
                    self.connect_timeout_ms / 1000,
                    self.timeout_ms / 1000,
                ),
                verify=self.verify_tls,
                **kwargs,
            )
        except requests.RequestException as exc:
            reason = _redact(str(exc), params.get("access_token"))
            _logger.warning("%s %s failed: %s", method, url, reason)
            raise TransportError(
                f"{method} {endpoint} failed: {reason}", code=type(exc).__name__
            ) from None

        if not resp.content:
            _logger.warning("%s %s returned an empty body", method, url)
            raise TransportError(
                f"{method} {endpoint} returned an empty body",
                code="empty_response",
            )

        try:
            return resp.json()
        except ValueError as exc:
            _logger.warning("%s %s returned a non-JSON body", method, url)
            raise DecodeError(
                f"{method} {endpoint} returned a non-JSON body", body=resp.text
            ) from exc

    def _store_token(self, response: Any, what: str) -> Any:
        token = extract_access_token(response)
        if not token:
            raise TokenExchangeError(
                f"Error getting {what}: {response!r}", response=response
            )
        self.access_token = token
        return response

    # ── Auth ──────────────────────────────────────────────

    def build_authorization_url(
        self, scopes: Sequence[str] = DEFAULT_SCOPES, state: str = ""
    ) -> str:
        config = self._require_config("build_authorization_url")
        return build_authorization_url(
            config.app_id, config.redirect_uri, scopes, state
        )

    def exchange_code_for_token(self, code: str) -> Any:
        """Trade an authorization code for a short-lived token."""
        config = self._require_config("exchange_code_for_token")
        response = self._request(
            TOKEN_URL,
            {
                "client_id": config.app_id,
                "client_secret": config.app_secret,
                "grant_type": "authorization_code",
                "redirect_uri": config.redirect_uri,
                "code": code,
            },
            method="POST",
        )
        return self._store_token(response, "access token")

    def exchange_for_long_lived_token(self) -> Any:
        """Trade the current short-lived token for a long-lived one."""
        token = self._require_token("exchange_for_long_lived_token")
        config = self._require_config("exchange_for_long_lived_token")
        response = self._request(
            EXCHANGE_TOKEN_URL,
            {
                "grant_type": "ig_exchange_token",
                "client_secret": config.app_secret,
                "access_token": token,
            },
        )
        return self._store_token(response, "long-lived token")

    def refresh_long_lived_token(self) -> Any:
        """Extend the current long-lived token."""
        token = self._require_token("refresh_long_lived_token")
        response = self._request(
            REFRESH_TOKEN_URL,
            {"grant_type": "ig_refresh_token", "access_token": token},
        )
        return self._store_token(response, "refreshed long-lived token")

    # ── Resources ─────────────────────────────────────────

    def get_user_profile(self) -> Any:
        return self._request("me", {"fields": self.user_fields})

    def get_user_media(
        self,
        user_id: str,
        limit: int = 10,
        pagination: Optional[Mapping[str, str]] = None,
    ) -> Any:
        params: dict[str, object] = {"fields": self.media_fields, "limit": limit}
        for key, value in (pagination or {}).items():
            if key in PAGINATION_KEYS:
                params[key] = value
        return self._request(f"{user_id}/media", params)

    def get_media(self, media_id: str) -> Any:
        return self._request(media_id, {"fields": self.media_fields})

    def get_media_children(self, media_id: str) -> Any:
        return self._request(
            f"{media_id}/children", {"fields": self.media_children_fields}
        )

    # ── Pagination ────────────────────────────────────────

    def follow_pagination(self, response: Any) -> Any:
        """Fetch the page after ``response``; ``None`` when there is none."""
        paging = response.get("paging") if isinstance(response, Mapping) else None
        if not isinstance(paging, Mapping):
            raise PaginationUnsupportedError(
                "Response has no paging metadata to follow"
            )

        next_url = paging.get("next")
        if not next_url:
            return None

        base, sep, query = next_url.partition("?")
        if not sep:
            return None

        segments = urllib.parse.urlsplit(base).path.strip("/").split("/")
        if segments and _VERSION_SEGMENT.match(segments[0]):
            segments = segments[1:]
        endpoint = "/".join(segments)

        params = dict(urllib.parse.parse_qsl(query, keep_blank_values=True))
        # the dispatcher attaches the client's own token
        params.pop("access_token", None)

        return self._request(endpoint, params)

    def iter_pages(self, response: Any) -> Iterator[Any]:
        """Yield ``response`` and every page after it."""
        page = response
        while page is not None:
            yield page
            page = self.follow_pagination(page)


# ── CLI ───────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Instagram API client")
    parser.add_argument(
        "--access-token", default=os.environ.get("INSTAGRAM_ACCESS_TOKEN")
    )
    parser.add_argument("--app-id", default=os.environ.get("INSTAGRAM_APP_ID"))
    parser.add_argument(
        "--app-secret", default=os.environ.get("INSTAGRAM_APP_SECRET")
    )
    parser.add_argument(
        "--redirect-uri", default=os.environ.get("INSTAGRAM_REDIRECT_URI")
    )
    parser.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS)
    parser.add_argument(
        "--connect-timeout-ms", type=int, default=DEFAULT_CONNECT_TIMEOUT_MS
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="skip TLS certificate verification",
    )
    parser.add_argument("--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("profile")
    p.add_argument("--fields")

    p = sub.add_parser("media")
    p.add_argument("--user-id", default="me")
    p.add_argument("--limit", type=int, default=10)
    for key in PAGINATION_KEYS:
        p.add_argument(f"--{key}")
    p.add_argument("--all", action="store_true", help="follow every page")
    p.add_argument("--fields")

    p = sub.add_parser("get-media")
    p.add_argument("--media-id", required=True)
    p.add_argument("--fields")

    p = sub.add_parser("children")
    p.add_argument("--media-id", required=True)
    p.add_argument("--fields")

    sub.add_parser("exchange")
    sub.add_parser("refresh")

    return parser


def _media(client: InstagramClient, args: argparse.Namespace) -> Any:
    if args.fields:
        client.media_fields = args.fields
    cursors = {
        key: getattr(args, key)
        for key in PAGINATION_KEYS
        if getattr(args, key) is not None
    }
    first = client.get_user_media(args.user_id, args.limit, cursors)
    if not args.all:
        return first

    items: list = []
    for page in client.iter_pages(first):
        items.extend(page.get("data", []))
    return {"data": items}


def _profile(client: InstagramClient, args: argparse.Namespace) -> Any:
    if args.fields:
        client.user_fields = args.fields
    return client.get_user_profile()


def _get_media(client: InstagramClient, args: argparse.Namespace) -> Any:
    if args.fields:
        client.media_fields = args.fields
    return client.get_media(args.media_id)


def _children(client: InstagramClient, args: argparse.Namespace) -> Any:
    if args.fields:
        client.media_children_fields = args.fields
    return client.get_media_children(args.media_id)


_DISPATCH = {
    "profile": _profile,
    "media": _media,
    "get-media": _get_media,
    "children": _children,
    "exchange": lambda c, _: c.exchange_for_long_lived_token(),
    "refresh": lambda c, _: c.refresh_long_lived_token(),
}


def main() -> None:
    """CLI entry point for API operations."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.access_token:
        parser.error("--access-token or INSTAGRAM_ACCESS_TOKEN is required")

    # only the long-lived exchange reads app settings, and of those only the secret
    config = None
    if args.app_secret:
        config = ClientConfig(
            app_id=args.app_id or "",
            app_secret=args.app_secret,
            redirect_uri=args.redirect_uri or "",
        )

    handler = _DISPATCH.get(args.command)
    if not handler:
        print("Unknown command", file=sys.stderr)
        sys.exit(1)

    try:
        client = InstagramClient(
            config or args.access_token,
            access_token=args.access_token,
            timeout_ms=args.timeout_ms,
            connect_timeout_ms=args.connect_timeout_ms,
            verify_tls=not args.insecure,
        )
        result = handler(client, args)
        json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
        print()
    except InstagramError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        sys.exit(1)
