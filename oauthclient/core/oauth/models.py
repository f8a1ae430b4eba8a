"""Data objects exchanged with the identity service.

Decoded objects (Token, TokenIntrospect, OAuthUser) keep unknown JSON keys
in ``extra``. Request payloads (filter/create/update) are presence-encoded:
a field left as ``None`` is never sent, any other value (including an empty
string) is.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from .exceptions import DecodeError

T = TypeVar("T", bound="_Decoded")


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class AccountType(str, Enum):
    PERSONAL = "personal"
    BUSINESS = "business"


class _Decoded:
    """Mixin building a dataclass from a decoded JSON object."""

    @classmethod
    def from_dict(cls: Type[T], data: Any) -> T:
        if not isinstance(data, dict):
            raise DecodeError(f"Expected JSON object for {cls.__name__}, got {type(data).__name__}")
        known = {f.name for f in fields(cls) if f.name != "extra"}
        kwargs = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(**kwargs, extra=extra)


@dataclass
class Token(_Decoded):
    """Access/refresh token pair issued by a grant or a user creation."""
    access_token: str = ""
    refresh_token: str = ""
    expires_in: int = 0
    token_type: str = ""
    has_username_password: bool = False
    is_new: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TokenIntrospect(_Decoded):
    """Introspection snapshot of a token (RFC 7662 fields)."""
    active: bool = False
    scope: str = ""
    client_id: str = ""
    username: str = ""
    token_type: str = ""
    exp: Optional[int] = None
    iat: Optional[int] = None
    nbf: Optional[int] = None
    sub: str = ""
    aud: Any = None
    iss: str = ""
    jti: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OAuthUser(_Decoded):
    id: str = ""
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[str] = None
    address: Optional[str] = None
    phone_prefix: Optional[str] = None
    phone: Optional[str] = None
    fb_id: Optional[str] = None
    ak_id: Optional[str] = None
    account_type: Optional[str] = None
    client_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


class _FormPayload:
    """Mixin serializing the present (non-None) fields into form pairs."""

    def to_form(self) -> Dict[str, str]:
        form: Dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            form[f.name] = str(value)
        return form


@dataclass
class OAuthUserFilter(_FormPayload):
    """Lookup criteria for find_user; only set fields are sent."""
    username: Optional[str] = None
    email: Optional[str] = None
    fb_id: Optional[str] = None
    phone: Optional[str] = None
    phone_prefix: Optional[str] = None


@dataclass
class OAuthUserCreate(_FormPayload):
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None
    phone_prefix: Optional[str] = None
    phone: Optional[str] = None
    client_id: Optional[str] = None


@dataclass
class OAuthUserUpdate(_FormPayload):
    """Partial update of a user profile.

    ``dob`` is sent as the service expects it (a date string).
    """
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None
    password: Optional[str] = None
    password_confirmation: Optional[str] = None
    email: Optional[str] = None
    phone_prefix: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    fb_id: Optional[str] = None
    ak_id: Optional[str] = None
    account_type: Optional[AccountType] = None
