"""Identity service client library.

Architecture:
- transport.py: HTTP session, client basic auth, service bearer token
- urls.py: Endpoint derivation from the token URL
- responses.py: Response decoders for grant and resource endpoints
- client.py: TrustedClient (lifecycle, authenticated call, grant flows)
- users.py: User management operations
- models.py: Tokens, users and presence-encoded request payloads
- exceptions.py: Typed exceptions for error handling

Usage:
    from oauthclient.core.oauth import TrustedClient, OAuthUserFilter

    client = TrustedClient(config)
    client.configure()
    token = client.password_credentials_token("alice", "s3cret")
    user = client.users.find_user(OAuthUserFilter(email="alice@example.com"))
"""
from .client import TrustedClient, create_trusted_client
from .exceptions import (
    OAuthClientError,
    TransportError,
    DecodeError,
    RemoteError,
    ConfigurationError,
)
from .models import (
    Token,
    TokenIntrospect,
    OAuthUser,
    OAuthUserFilter,
    OAuthUserCreate,
    OAuthUserUpdate,
    Gender,
    AccountType,
)
from .responses import (
    WRONG_USERNAME_PASSWORD,
    GrantResponseDecoder,
    ResourceResponseDecoder,
)
from .transport import OAuthTransport, REQUEST_TIMEOUT
from .urls import EndpointResolver, derive_url
from .users import UserService

__all__ = [
    # Client
    "TrustedClient",
    "create_trusted_client",
    "OAuthTransport",
    "REQUEST_TIMEOUT",
    "EndpointResolver",
    "derive_url",
    "UserService",

    # Decoders
    "GrantResponseDecoder",
    "ResourceResponseDecoder",
    "WRONG_USERNAME_PASSWORD",

    # Exceptions
    "OAuthClientError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "ConfigurationError",

    # Models
    "Token",
    "TokenIntrospect",
    "OAuthUser",
    "OAuthUserFilter",
    "OAuthUserCreate",
    "OAuthUserUpdate",
    "Gender",
    "AccountType",
]
