"""Pytest configuration and shared fixtures"""

import json
import os
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from emergence_api.config import Config
from emergence_api.consts import TOKEN_EXPIRY_KEY, TOKEN_KEY, XAPP_TOKEN_PATH

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)


SHOW_PAYLOAD = {
    "id": "kate-macgarry-the-chaos",
    "name": "The Chaos",
    "description": "New sculpture and film.",
    "press_release": "Opening reception Thursday.",
    "status": "running",
    "start_at": "2015-10-01T12:00:00+00:00",
    "end_at": "2015-11-14T12:00:00+00:00",
    "partner": {"id": "the-approach", "name": "The Approach"},
    "location": {
        "address": "47 Approach Road",
        "city": "London",
        "state": "",
        "country": "United Kingdom",
    },
    "fair": None,
}


def in_future(hours: int = 24) -> datetime:
    return datetime.now(UTC) + timedelta(hours=hours)


def in_past(hours: int = 24) -> datetime:
    return datetime.now(UTC) - timedelta(hours=hours)


def xapp_body(token: str = "fresh-token", expiration: datetime | None = None) -> dict:
    """Credential exchange response as the service returns it"""
    expiration = expiration or in_future()
    return {"token": token, "expiration": expiration.isoformat()}


def copy_response(response: httpx.Response) -> httpx.Response:
    """Fresh response with the same status, headers and body"""
    return httpx.Response(
        response.status_code, headers=response.headers, content=response.content
    )


def write_token_file(path, token: str, expiration: datetime) -> None:
    with open(path, "w") as f:
        json.dump({TOKEN_KEY: token, TOKEN_EXPIRY_KEY: expiration.isoformat()}, f)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served.

    Routes on URL path; the credential exchange answers with ``xapp_response``
    unless a route for it is given explicitly.
    """

    def __init__(self, routes=None, xapp_response=None):
        self.requests: list[httpx.Request] = []
        self.routes = dict(routes or {})
        self.xapp_response = xapp_response or httpx.Response(200, json=xapp_body())
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path in self.routes:
            route = self.routes[request.url.path]
            if isinstance(route, Exception):
                raise route
            return copy_response(route)
        if request.url.path == XAPP_TOKEN_PATH:
            return copy_response(self.xapp_response)
        return httpx.Response(404, json={"error": "Not Found"})

    @property
    def xapp_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == XAPP_TOKEN_PATH]


@pytest.fixture
def token_file(tmp_path):
    """Path for a per-test token file"""
    return tmp_path / "xapp_token.json"


@pytest.fixture
def config(token_file):
    """Config with credentials and an isolated token file"""
    return Config(
        client_id="client-id",
        client_secret="client-secret",
        token_file=str(token_file),
        log_level="DEBUG",
    )


@pytest.fixture
def clean_env():
    """Fixture that temporarily clears EMERGENCE_* environment variables.

    This ensures Config tests see the true defaults without interference
    from environment variables that might be set in the user's shell.
    """
    emergence_vars = {
        key: value for key, value in os.environ.items() if key.startswith("EMERGENCE_")
    }

    for key in emergence_vars:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key, value in emergence_vars.items():
            os.environ[key] = value


@pytest.fixture
def clean_config(clean_env):
    """Config instance with clean environment."""
    return Config()
