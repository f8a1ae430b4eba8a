"""HTTP transport for the identity service.

Handles service authentication, token caching, and form POSTs.
"""
from __future__ import annotations
import logging
import threading
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, Optional

import requests
from requests.auth import HTTPBasicAuth

from .exceptions import DecodeError, RemoteError, TransportError
from .responses import decode_json

if TYPE_CHECKING:
    from oauthclient.config.settings import OAuthClientConfig

REQUEST_TIMEOUT = 5
DEFAULT_SERVICE_TOKEN_TTL = 60
REFRESH_MARGIN = timedelta(seconds=10)

FormData = Optional[Dict[str, Any]]

logger = logging.getLogger(__name__)


class OAuthTransport:
    """Form-encoded HTTP client bound to one OAuth client registration.

    Features:
    - One pooled requests.Session for every call
    - Basic-auth POSTs to the token endpoint for grant flows
    - Bearer-authenticated POSTs to resource endpoints, using a
      client-credentials token fetched on demand and reused until it expires

    Usage:
        transport = OAuthTransport(config)
        resp = transport.post_form("https://id.example.com/oauth/users/42")
        transport.close()
    """

    def __init__(self, config: OAuthClientConfig, session: Optional[requests.Session] = None):
        """Initialize transport.

        Args:
            config: Client registration (id, secret, token URL, scopes)
            session: Session to reuse; a new one is created when omitted
        """
        self.config = config
        self.session = session or requests.Session()
        self.timeout = config.timeout or REQUEST_TIMEOUT
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._lock = threading.Lock()

    @property
    def basic_auth(self) -> HTTPBasicAuth:
        return HTTPBasicAuth(self.config.client_id, self.config.client_secret)

    def post_grant(self, data: FormData) -> requests.Response:
        """POST a grant request to the token endpoint with client basic auth.

        Args:
            data: Form fields; list values are sent as repeated keys

        Returns:
            Response object, whatever its status

        Raises:
            TransportError: On connection failure
        """
        return self._post(self.config.token_url, data, auth=self.basic_auth)

    def post_form(self, url: str, data: FormData = None) -> requests.Response:
        """POST a form to a resource endpoint with the service bearer token.

        Args:
            url: Resource endpoint URL
            data: Form fields

        Returns:
            Response object, whatever its status

        Raises:
            TransportError: On connection failure
            RemoteError: If the service token cannot be obtained
        """
        headers = {"Authorization": f"Bearer {self.service_token()}"}
        return self._post(url, data, headers=headers)

    def service_token(self) -> str:
        """Return the cached client-credentials token, fetching a new one when expired."""
        with self._lock:
            if self._token and self._token_expires_at and datetime.now() < self._token_expires_at - REFRESH_MARGIN:
                return self._token

            token, expires_in = self._fetch_service_token()
            self._token = token
            self._token_expires_at = datetime.now() + timedelta(seconds=expires_in)
            logger.debug("Fetched service token for client %s (expires in %ss)", self.config.client_id, expires_in)
            return token

    def _fetch_service_token(self) -> tuple[str, int]:
        data = {"grant_type": "client_credentials"}
        if self.config.scopes:
            data["scope"] = " ".join(self.config.scopes)

        resp = self.post_grant(data)
        payload = decode_json(resp.content or b"", "client credentials response")
        if not isinstance(payload, dict):
            raise DecodeError("Client credentials response is not a JSON object", resp.content)

        if resp.status_code != 200:
            message = payload.get("error_description") or payload.get("error") or resp.reason or ""
            logger.warning("Client credentials grant rejected for %s (status %s)", self.config.client_id, resp.status_code)
            raise RemoteError(resp.status_code, str(message), payload.get("error"))

        token = payload.get("access_token")
        if not token:
            raise DecodeError("Client credentials response has no access_token", resp.content)
        try:
            expires_in = int(payload.get("expires_in") or DEFAULT_SERVICE_TOKEN_TTL)
        except (TypeError, ValueError) as e:
            raise DecodeError("Client credentials response has invalid expires_in", resp.content) from e
        return token, expires_in

    def _post(self, url: str, data: FormData, **kwargs) -> requests.Response:
        try:
            return self.session.post(url, data=data, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(url, e) from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "OAuthTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
