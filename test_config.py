"""
Test suite for workflow input handling and credential parsing.
"""
import json
import os
from datetime import datetime

import pytest

from calsync.config import (
    DEFAULT_COMMITTER_EMAIL,
    DEFAULT_COMMITTER_NAME,
    MAX_RESULTS_LIMIT,
    ClientSecrets,
    GoogleToken,
    load_settings,
    parse_repository,
)
from calsync.utils.environ import get_bool_env, get_input, input_env_names
from calsync.utils.error_handling import ConfigurationError

NODE_TOKEN = {
    "access_token": "ya29.token",
    "refresh_token": "1//refresh",
    "scope": "https://www.googleapis.com/auth/calendar.readonly",
    "token_type": "Bearer",
    "expiry_date": 1704103200000,
}

CLIENT_SECRETS = {
    "installed": {
        "client_id": "123.apps.googleusercontent.com",
        "client_secret": "shh",
        "redirect_uris": ["urn:ietf:wg:oauth:2.0:oob", "http://localhost"],
    }
}


@pytest.fixture
def action_env(monkeypatch):
    """A complete set of inputs as the Actions runner would export them."""
    for var in list(os.environ):
        if var.startswith("INPUT_"):
            monkeypatch.delenv(var)
    monkeypatch.setenv("INPUT_JSON-PATH", "data/events.json")
    monkeypatch.setenv("INPUT_REPO-TOKEN", "ghp_secret")
    monkeypatch.setenv("INPUT_CALENDAR-ID", "team@group.calendar.google.com")
    monkeypatch.setenv("INPUT_GOOGLE-TOKEN", json.dumps(NODE_TOKEN))
    monkeypatch.setenv("INPUT_GOOGLE-CREDENTIALS", json.dumps(CLIENT_SECRETS))
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo/calendar-data")
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
    return monkeypatch


def test_input_names_follow_runner_convention():
    assert input_env_names("json-path") == ["INPUT_JSON-PATH", "INPUT_JSON_PATH"]
    assert input_env_names("calendar id") == ["INPUT_CALENDAR_ID"]


def test_get_input_strips_and_falls_back_to_underscore_form(monkeypatch):
    monkeypatch.delenv("INPUT_JSON-PATH", raising=False)
    monkeypatch.setenv("INPUT_JSON_PATH", "  events.json \n")
    assert get_input("json-path") == "events.json"
    monkeypatch.setenv("INPUT_JSON-PATH", "other.json")
    assert get_input("json-path") == "other.json"


def test_get_input_default_for_blank_value(monkeypatch):
    monkeypatch.setenv("INPUT_CALENDAR-ID", "   ")
    assert get_input("calendar-id", "primary") == "primary"


@pytest.mark.parametrize("value, expected", [("1", True), ("TRUE", True), ("yes", True), ("0", False), ("off", False)])
def test_get_bool_env(monkeypatch, value, expected):
    monkeypatch.setenv("GITHUB_ACTIONS", value)
    assert get_bool_env("GITHUB_ACTIONS") is expected


def test_get_bool_env_default(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    assert get_bool_env("DEBUG") is False
    assert get_bool_env("DEBUG", True) is True


def test_parse_node_style_token():
    token = GoogleToken.parse(json.dumps(NODE_TOKEN))
    assert token.access_token == "ya29.token"
    assert token.refresh_token == "1//refresh"
    assert token.scopes == ["https://www.googleapis.com/auth/calendar.readonly"]
    assert token.expiry == datetime(2024, 1, 1, 10, 0, 0)


def test_parse_google_auth_style_token():
    token = GoogleToken.parse(json.dumps({
        "token": "ya29.other",
        "refresh_token": "1//r",
        "scopes": ["a", "b"],
        "expiry": "2024-01-01T10:00:00Z",
    }))
    assert token.access_token == "ya29.other"
    assert token.scopes == ["a", "b"]
    assert token.expiry == datetime(2024, 1, 1, 10, 0, 0)


def test_missing_token():
    with pytest.raises(ConfigurationError, match="Missing Token"):
        GoogleToken.parse("")


@pytest.mark.parametrize("text", ["{not json", '"just a string"', '{"token_type": "Bearer"}'])
def test_malformed_token(text):
    with pytest.raises(ConfigurationError, match="Failed to parse token"):
        GoogleToken.parse(text)


def test_parse_installed_and_web_credentials():
    secrets = ClientSecrets.parse(json.dumps(CLIENT_SECRETS))
    assert secrets.client_id == "123.apps.googleusercontent.com"
    assert secrets.redirect_uris[0] == "urn:ietf:wg:oauth:2.0:oob"
    assert secrets.token_uri == "https://oauth2.googleapis.com/token"

    web = ClientSecrets.parse(json.dumps({"web": CLIENT_SECRETS["installed"]}))
    assert web.client_secret == "shh"


def test_missing_and_malformed_credentials():
    with pytest.raises(ConfigurationError, match="Missing Credentials"):
        ClientSecrets.parse(None)
    with pytest.raises(ConfigurationError, match="Failed to parse credentials"):
        ClientSecrets.parse("{oops")
    with pytest.raises(ConfigurationError, match="Failed to parse credentials"):
        ClientSecrets.parse(json.dumps({"installed": {"client_id": "only-id"}}))


def test_load_settings(action_env):
    settings = load_settings()
    assert settings.json_path == "data/events.json"
    assert settings.repository == "octo/calendar-data"
    assert settings.calendar_id == "team@group.calendar.google.com"
    assert settings.max_results == 100
    assert settings.branch is None
    assert settings.commit_message == "Updated json programmatically"
    assert settings.api_url == "https://api.github.com"
    assert settings.client_secrets.client_id == "123.apps.googleusercontent.com"


def test_settings_repr_hides_secrets(action_env):
    text = repr(load_settings())
    assert "ghp_secret" not in text
    assert "ya29.token" not in text


def test_load_settings_optional_inputs(action_env):
    action_env.setenv("INPUT_BRANCH", "data")
    action_env.setenv("INPUT_MAX-RESULTS", "5000")
    action_env.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3/")
    settings = load_settings()
    assert settings.branch == "data"
    assert settings.max_results == MAX_RESULTS_LIMIT
    assert settings.api_url == "https://ghe.example.com/api/v3"


def test_load_settings_committer_from_underscore_inputs(action_env):
    """Composite actions forward inputs as INPUT_COMMITTER_NAME and INPUT_COMMITTER_EMAIL."""
    action_env.setenv("INPUT_COMMITTER_NAME", "Release Bot")
    action_env.setenv("INPUT_COMMITTER_EMAIL", "release@example.com")
    settings = load_settings()
    assert settings.committer_name == "Release Bot"
    assert settings.committer_email == "release@example.com"


def test_load_settings_committer_defaults(action_env):
    settings = load_settings()
    assert settings.committer_name == DEFAULT_COMMITTER_NAME
    assert settings.committer_email == DEFAULT_COMMITTER_EMAIL


def test_load_settings_requires_json_path(action_env):
    action_env.delenv("INPUT_JSON-PATH")
    with pytest.raises(ConfigurationError, match="json-path"):
        load_settings()


def test_load_settings_rejects_bad_token_before_anything_else(action_env):
    action_env.setenv("INPUT_GOOGLE-TOKEN", "{broken")
    with pytest.raises(ConfigurationError, match="Failed to parse token"):
        load_settings()


def test_load_settings_rejects_bad_max_results(action_env):
    action_env.setenv("INPUT_MAX-RESULTS", "lots")
    with pytest.raises(ConfigurationError, match="max-results"):
        load_settings()


@pytest.mark.parametrize("value", ["", "octo", "octo/", "/repo", "a/b/c"])
def test_parse_repository_rejects_malformed(value):
    with pytest.raises(ConfigurationError):
        parse_repository(value)
