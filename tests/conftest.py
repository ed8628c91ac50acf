"""
Shared fixtures for the instagram_api test suite.
"""

import json
from unittest.mock import MagicMock

import pytest

from instagram_api.types import ClientConfig


# ── Credential fixtures ──────────────────────────────────────

@pytest.fixture
def access_token():
    return "IGQVJ-short-lived-test-token"


@pytest.fixture
def long_lived_token():
    return "IGQVJ-long-lived-test-token"


@pytest.fixture
def client_config():
    return ClientConfig(
        app_id="1234567890",
        app_secret="app-secret-xyz",
        redirect_uri="https://example.com/auth/callback",
    )


@pytest.fixture(autouse=True)
def _clear_instagram_env(monkeypatch):
    for name in (
        "INSTAGRAM_ACCESS_TOKEN",
        "INSTAGRAM_APP_ID",
        "INSTAGRAM_APP_SECRET",
        "INSTAGRAM_REDIRECT_URI",
    ):
        monkeypatch.delenv(name, raising=False)


# ── Mock response factories ──────────────────────────────────

@pytest.fixture
def make_response():
    """Build a MagicMock shaped like a requests.Response carrying JSON."""

    def _make(payload, status_code=200):
        resp = MagicMock()
        resp.status_code = status_code
        resp.content = json.dumps(payload).encode()
        resp.text = json.dumps(payload)
        resp.json.return_value = payload
        return resp

    return _make


@pytest.fixture
def mock_token_response(access_token):
    """Response from /oauth/access_token."""
    return {
        "access_token": access_token,
        "user_id": 17841400000000000,
        "permissions": ["instagram_business_basic"],
    }


@pytest.fixture
def mock_long_lived_response(long_lived_token):
    """Response from /access_token and /refresh_access_token."""
    return {
        "access_token": long_lived_token,
        "token_type": "bearer",
        "expires_in": 5183944,
    }


@pytest.fixture
def mock_error_response():
    """Graph API error payload."""
    return {
        "error": {
            "message": "Invalid OAuth access token - Cannot parse access token",
            "type": "OAuthException",
            "code": 190,
        }
    }


@pytest.fixture
def mock_profile_response():
    return {"user_id": "17841400000000000", "username": "testuser", "id": "9876"}


@pytest.fixture
def mock_media_page():
    """First page of /me/media, with a next cursor."""
    return {
        "data": [
            {"id": "18000000000000001", "media_type": "IMAGE"},
            {"id": "18000000000000002", "media_type": "CAROUSEL_ALBUM"},
        ],
        "paging": {
            "cursors": {"before": "QVFIUmBEFORE", "after": "QVFIUmAFTER"},
            "next": (
                "https://graph.instagram.com/v20.0/17841400000000000/media"
                "?access_token=IGQVJ-leaked&fields=id%2Cmedia_type"
                "&limit=2&after=QVFIUmAFTER"
            ),
        },
    }


@pytest.fixture
def mock_last_page():
    """Final page: cursors but no next link."""
    return {
        "data": [{"id": "18000000000000003", "media_type": "VIDEO"}],
        "paging": {"cursors": {"before": "QVFIUmB3", "after": "QVFIUmA3"}},
    }
