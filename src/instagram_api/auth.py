"""
Instagram OAuth helpers
Authorization URL, redirect parsing and an interactive login flow.
"""

import argparse
import json
import logging
import os
import sys
import urllib.parse
from typing import Any, Optional, Sequence

from .errors import AuthorizationDeniedError, InstagramError
from .types import AUTH_URL, DEFAULT_SCOPES, ClientConfig

_logger = logging.getLogger(__name__)


def build_authorization_url(
    app_id: str,
    redirect_uri: str,
    scopes: Sequence[str] = DEFAULT_SCOPES,
    state: str = "",
) -> str:
    """Build the URL the user visits to grant the app access."""
    params = {
        "client_id": app_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": ",".join(scopes),
        "state": state,
    }
    return AUTH_URL + "?" + urllib.parse.urlencode(params)


def _clean_code(code: str) -> str:
    # Instagram appends "#_" to the code in the redirect
    return code.strip().split("#", 1)[0]


def parse_redirect(url: str) -> tuple[str, str]:
    """Return ``(code, state)`` from the URL Instagram redirected to."""
    query = urllib.parse.urlsplit(url.strip()).query
    params = urllib.parse.parse_qs(query)

    if "error" in params:
        reason = params.get("error_reason", [None])[0]
        description = params.get("error_description", [None])[0]
        _logger.warning("Authorization denied: %s", reason or params["error"][0])
        raise AuthorizationDeniedError(
            f"Authorization failed: {params['error'][0]}"
            + (f" ({description})" if description else ""),
            reason=reason,
            description=description,
        )

    codes = params.get("code")
    if not codes or not codes[0]:
        raise AuthorizationDeniedError("Redirect URL carries no authorization code")

    state = params.get("state", [""])[0]
    return _clean_code(codes[0]), state


def extract_access_token(response: Any) -> Optional[str]:
    """Return the ``access_token`` of a token response, if any."""
    if isinstance(response, dict):
        return response.get("access_token") or None
    return None


def _read_code(raw: str) -> tuple[str, Optional[str]]:
    """Accept either the full redirect URL or the bare code."""
    if raw.strip().startswith(("http://", "https://")):
        code, state = parse_redirect(raw)
        return code, state
    return _clean_code(raw), None


def authenticate(
    config: ClientConfig,
    scopes: Sequence[str] = DEFAULT_SCOPES,
    state: str = "",
    long_lived: bool = True,
):
    """Full interactive login flow. Returns an authorized InstagramClient."""
    from .client import InstagramClient

    client = InstagramClient(config)
    url = client.build_authorization_url(scopes, state)

    print("[*] Open this URL and approve access:", file=sys.stderr)
    print(f"    {url}", file=sys.stderr)
    print("[*] Paste the redirect URL (or code):", file=sys.stderr)

    code, returned_state = _read_code(sys.stdin.readline())
    if state and returned_state is not None and returned_state != state:
        raise AuthorizationDeniedError(
            "State mismatch in redirect", reason="state_mismatch"
        )

    client.exchange_code_for_token(code)
    print("[+] Short-lived token received", file=sys.stderr)

    if long_lived:
        client.exchange_for_long_lived_token()
        print("[+] Exchanged for long-lived token", file=sys.stderr)

    print("[+] Ready", file=sys.stderr)
    return client


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Instagram OAuth login")
    parser.add_argument("--app-id", default=os.environ.get("INSTAGRAM_APP_ID"))
    parser.add_argument(
        "--app-secret", default=os.environ.get("INSTAGRAM_APP_SECRET")
    )
    parser.add_argument(
        "--redirect-uri", default=os.environ.get("INSTAGRAM_REDIRECT_URI")
    )
    parser.add_argument("--scope", nargs="*", default=list(DEFAULT_SCOPES))
    parser.add_argument("--state", default="")
    parser.add_argument(
        "--short-lived",
        action="store_true",
        help="skip the long-lived token exchange",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def main() -> None:
    """CLI entry point: run the login flow and print the token as JSON."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    missing = [
        flag
        for flag, value in (
            ("--app-id", args.app_id),
            ("--app-secret", args.app_secret),
            ("--redirect-uri", args.redirect_uri),
        )
        if not value
    ]
    if missing:
        parser.error("missing " + ", ".join(missing))

    config = ClientConfig(args.app_id, args.app_secret, args.redirect_uri)
    try:
        client = authenticate(
            config, args.scope, args.state, long_lived=not args.short_lived
        )
    except InstagramError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        sys.exit(1)

    json.dump({"access_token": client.access_token}, sys.stdout, indent=2)
    print()
