"""Configuration module for the trusted OAuth client."""
from .settings import OAuthClientConfig, apply_flags, load_settings, register_flags

__all__ = ["OAuthClientConfig", "load_settings", "register_flags", "apply_flags"]
