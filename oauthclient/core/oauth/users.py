"""User management operations on the identity service."""
from __future__ import annotations
from typing import TYPE_CHECKING
from urllib.parse import quote

from .exceptions import DecodeError
from .models import OAuthUser, OAuthUserCreate, OAuthUserFilter, OAuthUserUpdate, Token
from .responses import decode_json

if TYPE_CHECKING:
    from .client import TrustedClient


class UserService:
    """Service for managing users through a trusted client."""

    def __init__(self, client: TrustedClient):
        """Initialize user service.

        Args:
            client: Trusted client the calls go through
        """
        self.client = client

    def find_user_by_id(self, user_id: str) -> OAuthUser:
        """Return the user with the given id.

        Raises:
            RemoteError: If the user does not exist (404) or the call is rejected
        """
        out = self.client.call(self.client.url(_user_path(user_id)))
        return self.client.decode(out, OAuthUser)

    def find_user(self, user_filter: OAuthUserFilter) -> OAuthUser:
        """Return the first user matching every set field of the filter.

        The service wraps the match as ``{"code": 200, "data": {...}}``.
        """
        out = self.client.call(self.client.url("find-user"), user_filter.to_form())
        envelope = decode_json(out, "find-user response")
        if not isinstance(envelope, dict):
            raise DecodeError("find-user response is not a JSON object", out)
        return OAuthUser.from_dict(envelope.get("data") or {})

    def create_user(self, user: OAuthUserCreate) -> Token:
        """Create a user from the set fields and return its first token."""
        out = self.client.call(self.client.url("users"), user.to_form())
        return self.client.decode(out, Token)

    def create_user_with_email(self, email: str) -> Token:
        out = self.client.call(self.client.url("users?type=gmail"), {"email": email})
        return self.client.decode(out, Token)

    def create_user_with_facebook(self, fb_id: str, email: str) -> Token:
        out = self.client.call(
            self.client.url("users?type=facebook"),
            {"fb_id": fb_id, "email": email},
        )
        return self.client.decode(out, Token)

    def create_user_with_account_kit(self, ak_id: str, email: str, phone_prefix: str, phone: str) -> Token:
        out = self.client.call(
            self.client.url("users?type=account-kit"),
            {
                "ak_id": ak_id,
                "email": email,
                "phone_prefix": phone_prefix,
                "phone": phone,
            },
        )
        return self.client.decode(out, Token)

    def update_user(self, user_id: str, update: OAuthUserUpdate) -> None:
        """Apply the set fields of ``update`` to a user.

        Args:
            user_id: User ID
            update: Partial update; unset fields are left untouched remotely
        """
        form = {"user_id": user_id}
        form.update(update.to_form())
        self.client.call(self.client.url(_user_path(user_id, "update")), form)

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        self.client.call(
            self.client.url(_user_path(user_id, "change-password")),
            {"old_password": old_password, "new_password": new_password},
        )

    def set_username_password(self, user_id: str, username: str, password: str) -> None:
        """Attach username/password login to a user created through a social provider."""
        self.client.call(
            self.client.url(_user_path(user_id, "set-username-password")),
            {"username": username, "password": password},
        )

    def delete_user(self, user_id: str) -> None:
        self.client.call(self.client.url(_user_path(user_id)), {})


def _user_path(user_id: str, action: str = "") -> str:
    """Return ``users/<id>[/<action>]`` with the id escaped as one path segment."""
    path = f"users/{quote(str(user_id), safe='')}"
    return f"{path}/{action}" if action else path
