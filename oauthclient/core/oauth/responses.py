"""Response classification for the two endpoint families.

Resource endpoints and the token (grant) endpoint use different success and
error envelopes, so each has its own decoder. Call sites pick one explicitly.
"""
from __future__ import annotations
import json
from typing import Any, Optional

import requests

from .exceptions import DecodeError, RemoteError
from .models import Token

WRONG_USERNAME_PASSWORD = "wrong_username_password"


def decode_json(body: bytes, what: str) -> Any:
    """Parse a JSON body, raising DecodeError instead of ValueError."""
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON in {what}: {e}", body) from e


class ResourceResponseDecoder:
    """Classify a resource endpoint response.

    2xx returns the raw body. Anything else is decoded as the service's
    application error envelope::

        {"status_code": 404, "message": "not found", "error_key": "ErrNotFound"}

    and raised as RemoteError carrying the HTTP status.
    """

    def classify(self, response: requests.Response) -> bytes:
        body = response.content or b""
        if 200 <= response.status_code < 300:
            return body

        payload = decode_json(body, "error response")
        if not isinstance(payload, dict):
            raise DecodeError("Error response is not a JSON object", body)

        error_code = payload.get("error_key") or payload.get("key")
        raise RemoteError(response.status_code, str(payload.get("message") or ""), error_code)


class GrantResponseDecoder:
    """Classify a token endpoint response of shape ``{"token": {...}, "error": ""}``.

    The envelope is decoded before the status is checked, so an unreadable
    body is a DecodeError whatever the status.

    Args:
        error_code: Classification tag attached to RemoteError on failure
    """

    def __init__(self, error_code: Optional[str] = None):
        self.error_code = error_code

    def classify(self, response: requests.Response) -> Token:
        body = response.content or b""
        envelope = decode_json(body, "grant response")
        if not isinstance(envelope, dict):
            raise DecodeError("Grant response is not a JSON object", body)

        if response.status_code != 200:
            raise RemoteError(response.status_code, str(envelope.get("error") or ""), self.error_code)

        token = envelope.get("token")
        if token is None:
            raise DecodeError("Grant response has no token", body)
        return Token.from_dict(token)
