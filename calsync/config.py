"""
Configuration management for Calendar JSON Sync.

Workflow inputs are read once, validated, and turned into a frozen
``Settings`` value. The Google credential blobs arrive as serialized JSON
and are parsed into structured values here, so a missing or malformed
credential fails the run before any API is contacted.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from calsync.utils.environ import get_input, get_str_env
from calsync.utils.error_handling import ConfigurationError
from calsync.utils.logging import logger

# ╔════════════════════════════════════════════════════════════════════╗
# ║ Defaults                                                            ║
# ╚════════════════════════════════════════════════════════════════════╝

DEFAULT_CALENDAR_ID = "primary"
DEFAULT_MAX_RESULTS = 100
MAX_RESULTS_LIMIT = 2500
DEFAULT_COMMIT_MESSAGE = "Updated json programmatically"
DEFAULT_COMMITTER_NAME = "Calendar Sync Bot"
DEFAULT_COMMITTER_EMAIL = "calendar-sync@users.noreply.github.com"
DEFAULT_API_URL = "https://api.github.com"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# ╔════════════════════════════════════════════════════════════════════╗
# ║ Credential Values                                                   ║
# ╚════════════════════════════════════════════════════════════════════╝

def _load_json_object(text: str, what: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Failed to parse {what}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Failed to parse {what}: expected a JSON object")
    return data


def _parse_expiry(data: Dict[str, Any]) -> Optional[datetime]:
    """Expiry as naive UTC, the form google-auth compares against."""
    if data.get("expiry_date") is not None:
        try:
            millis = float(data["expiry_date"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Failed to parse token: invalid expiry_date {data['expiry_date']!r}") from e
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).replace(tzinfo=None)
    if data.get("expiry"):
        try:
            expiry = datetime.fromisoformat(str(data["expiry"]).replace("Z", "+00:00"))
        except ValueError as e:
            raise ConfigurationError(f"Failed to parse token: invalid expiry {data['expiry']!r}") from e
        if expiry.tzinfo:
            expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)
        return expiry
    return None


@dataclass(frozen=True)
class GoogleToken:
    """An authorized-user OAuth token."""

    access_token: Optional[str]
    refresh_token: Optional[str]
    scopes: List[str] = field(default_factory=list)
    expiry: Optional[datetime] = None

    @classmethod
    def parse(cls, text: Optional[str]) -> "GoogleToken":
        """Parse a token in either the googleapis (Node) or google-auth shape."""
        if not text:
            raise ConfigurationError("Missing Token")
        data = _load_json_object(text, "token")
        access_token = data.get("access_token") or data.get("token")
        refresh_token = data.get("refresh_token")
        if not access_token and not refresh_token:
            raise ConfigurationError("Failed to parse token: neither access_token nor refresh_token present")
        scopes = data.get("scopes") or data.get("scope") or []
        if isinstance(scopes, str):
            scopes = scopes.split()
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            scopes=list(scopes),
            expiry=_parse_expiry(data),
        )


@dataclass(frozen=True)
class ClientSecrets:
    """OAuth client identity from a Google Cloud console credentials file."""

    client_id: str
    client_secret: str
    redirect_uris: List[str] = field(default_factory=list)
    token_uri: str = GOOGLE_TOKEN_URI

    @classmethod
    def parse(cls, text: Optional[str]) -> "ClientSecrets":
        if not text:
            raise ConfigurationError("Missing Credentials")
        data = _load_json_object(text, "credentials")
        section = data.get("installed") or data.get("web")
        if not isinstance(section, dict):
            raise ConfigurationError("Failed to parse credentials: expected an 'installed' or 'web' section")
        client_id = section.get("client_id")
        client_secret = section.get("client_secret")
        if not client_id or not client_secret:
            raise ConfigurationError("Failed to parse credentials: client_id and client_secret are required")
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uris=list(section.get("redirect_uris") or []),
            token_uri=section.get("token_uri") or GOOGLE_TOKEN_URI,
        )

# ╔════════════════════════════════════════════════════════════════════╗
# ║ Settings                                                            ║
# ╚════════════════════════════════════════════════════════════════════╝

@dataclass(frozen=True)
class Settings:
    json_path: str
    repository: str
    calendar_id: str
    repo_token: str = field(repr=False)
    google_token: GoogleToken = field(repr=False)
    client_secrets: ClientSecrets = field(repr=False)
    max_results: int = DEFAULT_MAX_RESULTS
    branch: Optional[str] = None
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    committer_name: str = DEFAULT_COMMITTER_NAME
    committer_email: str = DEFAULT_COMMITTER_EMAIL
    api_url: str = DEFAULT_API_URL


def _require_input(name: str) -> str:
    value = get_input(name)
    if not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def _parse_max_results(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"max-results must be an integer, got {raw!r}") from e
    if value < 1:
        raise ConfigurationError(f"max-results must be positive, got {value}")
    if value > MAX_RESULTS_LIMIT:
        logger.warning(f"max-results {value} exceeds the Calendar API limit, using {MAX_RESULTS_LIMIT}")
        return MAX_RESULTS_LIMIT
    return value


def parse_repository(value: Optional[str]) -> str:
    """Validate an ``owner/name`` repository identifier."""
    if not value:
        raise ConfigurationError("GITHUB_REPOSITORY is not set")
    owner, _, name = value.partition("/")
    if not owner or not name or "/" in name:
        raise ConfigurationError(f"GITHUB_REPOSITORY must look like 'owner/name', got {value!r}")
    return value


def load_settings() -> Settings:
    """Read and validate every input for one run."""
    google_token = GoogleToken.parse(get_input("google-token"))
    client_secrets = ClientSecrets.parse(get_input("google-credentials"))
    return Settings(
        json_path=_require_input("json-path"),
        repository=parse_repository(get_str_env("GITHUB_REPOSITORY", "")),
        calendar_id=get_input("calendar-id", DEFAULT_CALENDAR_ID),
        repo_token=_require_input("repo-token"),
        google_token=google_token,
        client_secrets=client_secrets,
        max_results=_parse_max_results(get_input("max-results", str(DEFAULT_MAX_RESULTS))),
        branch=get_input("branch") or None,
        commit_message=get_input("commit-message", DEFAULT_COMMIT_MESSAGE),
        committer_name=get_input("committer-name", DEFAULT_COMMITTER_NAME),
        committer_email=get_input("committer-email", DEFAULT_COMMITTER_EMAIL),
        api_url=(get_str_env("GITHUB_API_URL", "") or DEFAULT_API_URL).rstrip("/"),
    )


def log_startup_config(settings: Settings):
    """Log configuration summary at startup, without secrets."""
    logger.info(f"Calendar: {settings.calendar_id} (up to {settings.max_results} events)")
    logger.info(f"Target: {settings.repository}/{settings.json_path}"
                + (f" on branch {settings.branch}" if settings.branch else ""))
    logger.debug(f"Google token has refresh token: {'yes' if settings.google_token.refresh_token else 'no'}")
    logger.debug(f"OAuth client: {settings.client_secrets.client_id}")
