"""Tests for OAuthTransport (session use, basic auth, service token cache)."""
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
import requests
from requests.auth import HTTPBasicAuth

from oauthclient.config.settings import OAuthClientConfig
from oauthclient.core.oauth import DecodeError, OAuthTransport, RemoteError, TransportError

USERS_URL = "https://id.example.com/oauth/users/42"


@pytest.fixture()
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture()
def oauth_transport(oauth_config, session):
    return OAuthTransport(oauth_config, session=session)


def test_post_grant_uses_basic_auth(oauth_transport, session, stub_response):
    session.post.return_value = stub_response(200, {"token": {}})

    resp = oauth_transport.post_grant({"grant_type": "password"})

    assert resp.status_code == 200
    url = session.post.call_args.args[0]
    kwargs = session.post.call_args.kwargs
    assert url == "https://id.example.com/oauth/token"
    assert kwargs["data"] == {"grant_type": "password"}
    assert kwargs["auth"] == HTTPBasicAuth("svc", "svc-secret")
    assert kwargs["timeout"] == 5.0


def test_post_form_fetches_service_token_once(oauth_transport, session, stub_response):
    session.post.side_effect = [
        stub_response(200, {"access_token": "svc-token", "expires_in": 3600}),
        stub_response(200, {"id": "42"}),
        stub_response(204),
    ]

    oauth_transport.post_form(USERS_URL)
    oauth_transport.post_form(USERS_URL, {"a": "b"})

    assert session.post.call_count == 3
    grant = session.post.call_args_list[0]
    assert grant.kwargs["data"] == {"grant_type": "client_credentials", "scope": "profile users"}
    for call in session.post.call_args_list[1:]:
        assert call.args[0] == USERS_URL
        assert call.kwargs["headers"] == {"Authorization": "Bearer svc-token"}
        assert "auth" not in call.kwargs


def test_expired_service_token_is_refetched(oauth_transport, session, stub_response):
    session.post.side_effect = [
        stub_response(200, {"access_token": "first", "expires_in": 3600}),
        stub_response(200, {"access_token": "second"}),
    ]
    assert oauth_transport.service_token() == "first"

    oauth_transport._token_expires_at = datetime.now() + timedelta(seconds=5)

    assert oauth_transport.service_token() == "second"
    assert session.post.call_count == 2


def test_rejected_client_credentials(oauth_transport, session, stub_response):
    session.post.return_value = stub_response(401, {"error": "invalid_client", "error_description": "bad secret"})
    with pytest.raises(RemoteError) as excinfo:
        oauth_transport.post_form(USERS_URL)
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "bad secret"
    assert session.post.call_count == 1


@pytest.mark.parametrize("body", [b"<html></html>", b'{"token_type": "bearer"}'])
def test_unusable_client_credentials_response(oauth_transport, session, stub_response, body):
    session.post.return_value = stub_response(200, body=body)
    with pytest.raises(DecodeError):
        oauth_transport.service_token()


@pytest.mark.parametrize("expires_in", ["3600s", [3600], {"seconds": 3600}])
def test_invalid_expires_in_is_decode_error(oauth_transport, session, stub_response, expires_in):
    session.post.return_value = stub_response(200, {"access_token": "t", "expires_in": expires_in})
    with pytest.raises(DecodeError):
        oauth_transport.service_token()
    assert oauth_transport._token is None


def test_connection_failure_becomes_transport_error(oauth_transport, session):
    session.post.side_effect = requests.ConnectionError("connection refused")
    with pytest.raises(TransportError) as excinfo:
        oauth_transport.post_grant({"grant_type": "password"})
    assert excinfo.value.endpoint == "https://id.example.com/oauth/token"
    assert isinstance(excinfo.value.cause, requests.ConnectionError)


def test_timeout_comes_from_config(session, stub_response):
    transport = OAuthTransport(OAuthClientConfig(token_url="https://x/token", timeout=1.5), session=session)
    session.post.return_value = stub_response(200, {})
    transport.post_grant({})
    assert session.post.call_args.kwargs["timeout"] == 1.5


def test_no_scope_when_none_configured(session, stub_response):
    transport = OAuthTransport(OAuthClientConfig(client_id="svc", token_url="https://x/token"), session=session)
    session.post.return_value = stub_response(200, {"access_token": "t"})
    transport.service_token()
    assert session.post.call_args.kwargs["data"] == {"grant_type": "client_credentials"}


def test_context_manager_closes_session(oauth_config, session):
    with OAuthTransport(oauth_config, session=session):
        pass
    session.close.assert_called_once()
