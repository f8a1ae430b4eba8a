"""Endpoint derivation from the configured token URL."""
from __future__ import annotations
from urllib.parse import urlsplit

from .exceptions import ConfigurationError

TOKEN_SEGMENT = "token"


class EndpointResolver:
    """Resolve resource endpoints relative to the token endpoint.

    The token URL is parsed once. Its last path segment must be ``token``;
    everything before it is kept as the prefix every resource path is
    appended to, so ``https://id.example.com/oauth/token`` resolves
    ``users/42`` to ``https://id.example.com/oauth/users/42``.
    """

    def __init__(self, token_url: str):
        self.token_url = token_url
        self.prefix = _split_prefix(token_url)

    def url(self, resource_path: str) -> str:
        return f"{self.prefix}/{resource_path.lstrip('/')}"


def _split_prefix(token_url: str) -> str:
    if not token_url:
        raise ConfigurationError("Token URL is empty")

    parts = urlsplit(token_url)
    if not parts.scheme or not parts.netloc:
        raise ConfigurationError(f"Token URL must be absolute: {token_url!r}")
    if parts.query or parts.fragment:
        raise ConfigurationError(f"Token URL must not carry a query or fragment: {token_url!r}")

    prefix, _, last = parts.path.rstrip("/").rpartition("/")
    if last != TOKEN_SEGMENT:
        raise ConfigurationError(
            f"Token URL path must end with '/{TOKEN_SEGMENT}': {token_url!r}"
        )
    return f"{parts.scheme}://{parts.netloc}{prefix}"


def derive_url(base_token_url: str, resource_path: str) -> str:
    """Return the endpoint URL for ``resource_path`` next to ``base_token_url``.

    Raises:
        ConfigurationError: If the base URL does not end with the token segment
    """
    return EndpointResolver(base_token_url).url(resource_path)
