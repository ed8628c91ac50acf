"""
Shared types and constants for the Instagram client.
"""

from dataclasses import dataclass

API_URL = "https://graph.instagram.com/"
API_VERSION = "v20.0"
AUTH_URL = "https://www.instagram.com/oauth/authorize"
TOKEN_URL = "https://api.instagram.com/oauth/access_token"
EXCHANGE_TOKEN_URL = "https://graph.instagram.com/access_token"
REFRESH_TOKEN_URL = "https://graph.instagram.com/refresh_access_token"

DEFAULT_SCOPES = ("instagram_business_basic",)
PAGINATION_KEYS = ("since", "until", "before", "after")

DEFAULT_TIMEOUT_MS = 3000
DEFAULT_CONNECT_TIMEOUT_MS = 3000

DEFAULT_USER_FIELDS = "user_id, username"
DEFAULT_MEDIA_CHILDREN_FIELDS = (
    "id, media_type, media_url, permalink, thumbnail_url, timestamp, username"
)
DEFAULT_MEDIA_FIELDS = (
    "caption, id, media_type, media_url, permalink, thumbnail_url, timestamp, "
    f"username, children{{{DEFAULT_MEDIA_CHILDREN_FIELDS}}}"
)


@dataclass(frozen=True)
class ClientConfig:
    app_id: str
    app_secret: str
    redirect_uri: str


@dataclass
class FieldSelector:
    """Comma-separated field lists sent as ``fields`` on resource reads."""

    user_fields: str = DEFAULT_USER_FIELDS
    media_fields: str = DEFAULT_MEDIA_FIELDS
    media_children_fields: str = DEFAULT_MEDIA_CHILDREN_FIELDS
