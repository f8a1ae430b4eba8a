"""Trusted client for the identity service.

Owns the transport, derives endpoint URLs, runs the grant flows and the
authenticated resource call every user operation goes through.
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Optional, Type, TypeVar

import requests

from .exceptions import ConfigurationError
from .models import Token, TokenIntrospect
from .responses import (
    WRONG_USERNAME_PASSWORD,
    GrantResponseDecoder,
    ResourceResponseDecoder,
    decode_json,
)
from .transport import FormData, OAuthTransport
from .urls import EndpointResolver
from .users import UserService

if TYPE_CHECKING:
    from oauthclient.config.settings import OAuthClientConfig

M = TypeVar("M")

logger = logging.getLogger(__name__)


class TrustedClient:
    """Client-credentials holder acting on behalf of a hosting application.

    Lifecycle:
    - configure()/run(): validate the token URL and build the transport
      (skipped when no token URL is set; the client then stays unconfigured)
    - stop(): release pooled connections

    Usage:
        with TrustedClient(load_settings("oauth")) as oauth:
            token = oauth.password_credentials_token("alice", "s3cret")
            user = oauth.users.find_user_by_id("42")
    """

    def __init__(self, config: OAuthClientConfig, transport: Optional[OAuthTransport] = None):
        """Initialize client.

        Args:
            config: Client registration
            transport: Pre-built transport (tests inject fakes here);
                built from config on configure() when omitted
        """
        self.config = config
        self.transport = transport
        self.endpoints: Optional[EndpointResolver] = None
        self.users = UserService(self)
        self._resource_decoder = ResourceResponseDecoder()
        self._password_decoder = GrantResponseDecoder(WRONG_USERNAME_PASSWORD)
        self._refresh_decoder = GrantResponseDecoder()

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def prefix(self) -> str:
        return self.config.name

    @property
    def is_configured(self) -> bool:
        return self.endpoints is not None and self.transport is not None

    def configure(self) -> None:
        """Validate the token URL and build the transport.

        Raises:
            ConfigurationError: If the token URL does not end with /token
        """
        if self.is_configured:
            return
        if not self.config.token_url:
            logger.info("%s: no token URL configured, client disabled", self.name)
            return

        self.endpoints = EndpointResolver(self.config.token_url)
        if self.transport is None:
            self.transport = OAuthTransport(self.config)
        logger.info("%s: configured against %s", self.name, self.endpoints.prefix)

    def run(self) -> None:
        self.configure()

    def stop(self) -> None:
        if self.transport is not None:
            self.transport.close()
            logger.info("%s: stopped", self.name)

    def __enter__(self) -> "TrustedClient":
        self.configure()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def url(self, resource_path: str) -> str:
        """Return the endpoint URL for a resource path such as ``users/42``."""
        self._require_configured()
        return self.endpoints.url(resource_path)

    def call(self, url: str, form: FormData = None) -> bytes:
        """POST a form to a resource endpoint and return the raw success body.

        Args:
            url: Endpoint URL (see url())
            form: Form fields

        Returns:
            Response body for any 2xx status (possibly empty)

        Raises:
            RemoteError: Non-2xx response with a decodable error envelope
            DecodeError: Non-2xx response whose body is not an error envelope
            TransportError: Connection failure
        """
        self._require_configured()
        resp = self.transport.post_form(url, form)
        return self._resource_decoder.classify(resp)

    def decode(self, body: bytes, model: Type[M]) -> M:
        """Decode a JSON success body into a model with ``from_dict``."""
        return model.from_dict(decode_json(body, model.__name__))

    # ─────────────────────────────────────────────────────────────────────
    # Grant flows
    # ─────────────────────────────────────────────────────────────────────
    def password_credentials_token(self, username: str, password: str) -> Token:
        """Exchange a username and password for a token (password grant).

        Raises:
            RemoteError: Rejected grant, tagged "wrong_username_password"
            DecodeError: Response is not a token envelope
            TransportError: Connection failure
        """
        resp = self._grant({
            "grant_type": "password",
            "username": username,
            "password": password,
        })
        token = self._password_decoder.classify(resp)
        token.has_username_password = True
        token.is_new = False
        return token

    def refresh_token(self, refresh_token: str) -> Token:
        """Exchange a refresh token for a new token (refresh grant).

        Raises:
            RemoteError: Rejected grant (no classification tag)
            DecodeError: Response is not a token envelope
            TransportError: Connection failure
        """
        resp = self._grant({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        return self._refresh_decoder.classify(resp)

    def _grant(self, form: dict) -> requests.Response:
        self._require_configured()
        form["scope"] = list(self.config.scopes)
        return self.transport.post_grant(form)

    # ─────────────────────────────────────────────────────────────────────
    # Token operations
    # ─────────────────────────────────────────────────────────────────────
    def introspect(self, token: str) -> TokenIntrospect:
        """Return activity, scope, owner and expiry of an access token."""
        out = self.call(self.url("introspect"), {"token": token})
        return self.decode(out, TokenIntrospect)

    def revoke_token(self, token: str) -> None:
        """Accept a token for revocation.

        The identity service exposes no revocation endpoint to trusted
        clients; this always succeeds without a network call.
        """
        return None

    def _require_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(f"{self.name} client is not configured (token URL missing or configure() not called)")


def create_trusted_client(config: OAuthClientConfig, session: Optional[requests.Session] = None) -> TrustedClient:
    """Create a configured TrustedClient.

    Args:
        config: Client registration
        session: Optional requests.Session for the transport

    Raises:
        ConfigurationError: If no token URL is set or it has the wrong shape
    """
    client = TrustedClient(config, OAuthTransport(config, session=session))
    client.configure()
    if not client.is_configured:
        raise ConfigurationError(f"{config.name}: token URL is required")
    return client
