"""Pytest shared fixtures for the trusted OAuth client."""
import json
import pathlib
import sys
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from oauthclient.config.settings import OAuthClientConfig
from oauthclient.core.oauth import TrustedClient

TOKEN_URL = "https://id.example.com/oauth/token"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting a live identity service.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _blocked(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests.Session, "request", _blocked)


# ─────────────────────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload=None, body: Optional[bytes] = None, reason: str = ""):
        self.status_code = status_code
        if body is None:
            body = b"" if payload is None else json.dumps(payload).encode()
        self.content = body
        self.text = body.decode("utf-8", errors="replace")
        self.reason = reason

    def json(self):
        return json.loads(self.content)


class FakeTransport:
    """Records every POST and replays queued responses in order."""

    def __init__(self, *responses: StubResponse):
        self.responses = list(responses)
        self.form_calls = []
        self.grant_calls = []
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.form_calls) + len(self.grant_calls)

    def queue(self, response: StubResponse) -> None:
        self.responses.append(response)

    def post_form(self, url, data=None):
        self.form_calls.append((url, data))
        return self._next()

    def post_grant(self, data):
        self.grant_calls.append(data)
        return self._next()

    def close(self):
        self.closed = True

    def _next(self):
        if not self.responses:
            raise AssertionError("FakeTransport has no queued response")
        return self.responses.pop(0)


@pytest.fixture()
def oauth_config() -> OAuthClientConfig:
    return OAuthClientConfig(
        client_id="svc",
        client_secret="svc-secret",
        token_url=TOKEN_URL,
        scopes=("profile", "users"),
    )


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def oauth_client(oauth_config, transport) -> TrustedClient:
    """Configured TrustedClient wired to a FakeTransport."""
    client = TrustedClient(oauth_config, transport=transport)
    client.configure()
    return client


@pytest.fixture()
def stub_response():
    """Factory for StubResponse objects."""
    return StubResponse
