"""Trusted OAuth2 client package.

To use the client:
    from oauthclient.config import load_settings
    from oauthclient.core.oauth import TrustedClient

    with TrustedClient(load_settings("oauth")) as oauth:
        token = oauth.password_credentials_token("alice", "s3cret")
"""
