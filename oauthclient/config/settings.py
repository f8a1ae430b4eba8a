"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import argparse
import logging
import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from oauthclient.core.oauth.exceptions import ConfigurationError

DEFAULT_NAME = "oauth"
DEFAULT_TIMEOUT = 5.0

logger = logging.getLogger(__name__)


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.info("Loaded %s from environment (fallback)", env_var)
            return secret_value

    return None


@dataclass(frozen=True)
class OAuthClientConfig:
    """Client registration against the identity service.

    ``name`` namespaces environment variables (``OAUTH_CLIENT_ID``) and
    startup flags (``--oauth-client-id``).
    """
    client_id: str = ""
    client_secret: str = ""
    token_url: str = ""
    scopes: tuple[str, ...] = ()
    timeout: float = DEFAULT_TIMEOUT
    name: str = DEFAULT_NAME

    @property
    def env_prefix(self) -> str:
        return _env_prefix(self.name)

    @property
    def flag_prefix(self) -> str:
        return f"{self.name}-"

    @property
    def is_configured(self) -> bool:
        return bool(self.token_url)


def _env_prefix(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", name).upper() + "_"


def _parse_scopes(raw: str) -> tuple[str, ...]:
    return tuple(s for s in re.split(r"[\s,]+", raw.strip()) if s)


def _parse_timeout(raw: str, var_name: str) -> float:
    try:
        timeout = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{var_name} must be a number of seconds, got {raw!r}") from e
    if timeout <= 0:
        raise ConfigurationError(f"{var_name} must be positive, got {raw!r}")
    return timeout


def load_settings(name: str = DEFAULT_NAME) -> OAuthClientConfig:
    """Build client configuration from the environment.

    Variables are prefixed with the upper-cased name, e.g. for ``oauth``:
    OAUTH_CLIENT_ID, OAUTH_CLIENT_SECRET, OAUTH_TOKEN_URL, OAUTH_SCOPES,
    OAUTH_TIMEOUT. The secret is read from /run/secrets/<name>_client_secret
    before falling back to the environment.

    Raises:
        ConfigurationError: If OAUTH_TIMEOUT is not a positive number
    """
    prefix = _env_prefix(name)

    client_id = os.environ.get(f"{prefix}CLIENT_ID", "")
    client_secret = _load_secret_from_file(
        f"{prefix.lower()}client_secret",
        env_var=f"{prefix}CLIENT_SECRET",
    ) or ""
    token_url = os.environ.get(f"{prefix}TOKEN_URL", "")
    scopes = _parse_scopes(os.environ.get(f"{prefix}SCOPES", ""))

    raw_timeout = os.environ.get(f"{prefix}TIMEOUT")
    timeout = _parse_timeout(raw_timeout, f"{prefix}TIMEOUT") if raw_timeout else DEFAULT_TIMEOUT

    if not token_url:
        logger.warning("%sTOKEN_URL is not set; %s client stays unconfigured", prefix, name)
    logger.info("[settings] %s: client_id=%s; token_url=%s; scopes=%s", name, client_id, token_url, list(scopes))

    return OAuthClientConfig(
        client_id=client_id,
        client_secret=client_secret,
        token_url=token_url,
        scopes=scopes,
        timeout=timeout,
        name=name,
    )


def register_flags(parser: argparse.ArgumentParser, config: OAuthClientConfig) -> None:
    """Add ``--<name>-client-id``, ``--<name>-client-secret`` and ``--<name>-token-url``.

    Defaults come from ``config`` so flags only override what is given.
    """
    prefix = config.flag_prefix
    parser.add_argument(f"--{prefix}client-secret", default=config.client_secret, help="oauth client secret")
    parser.add_argument(f"--{prefix}client-id", default=config.client_id, help="oauth client id")
    parser.add_argument(f"--{prefix}token-url", default=config.token_url, help="oauth token url")


def apply_flags(config: OAuthClientConfig, args: argparse.Namespace) -> OAuthClientConfig:
    """Return a copy of ``config`` with values parsed by register_flags applied."""
    dest = config.flag_prefix.replace("-", "_")

    def _flag(field_name: str, current: str) -> str:
        value: Optional[str] = getattr(args, f"{dest}{field_name}", None)
        return current if value is None else value

    return replace(
        config,
        client_id=_flag("client_id", config.client_id),
        client_secret=_flag("client_secret", config.client_secret),
        token_url=_flag("token_url", config.token_url),
    )
