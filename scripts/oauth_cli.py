"""Command-line access to the identity service through the trusted client.

This module serves as a CLI wrapper around oauthclient.core.oauth.
"""
from __future__ import annotations
import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from oauthclient.config import apply_flags, load_settings, register_flags
from oauthclient.core.oauth import (
    OAuthClientError,
    OAuthUserCreate,
    OAuthUserFilter,
    RemoteError,
    create_trusted_client,
)

CLIENT_NAME = "oauth"


def _emit(result) -> None:
    print(json.dumps(asdict(result), indent=2, sort_keys=True))


def build_parser(config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Trusted OAuth client helper")
    register_flags(parser, config)

    sub = parser.add_subparsers(dest="cmd")

    login = sub.add_parser("login", help="password grant")
    login.add_argument("--username", required=True)
    login.add_argument("--password", required=True)

    refresh = sub.add_parser("refresh", help="refresh grant")
    refresh.add_argument("--refresh-token", required=True)

    intro = sub.add_parser("introspect")
    intro.add_argument("--token", required=True)

    find = sub.add_parser("find-user")
    find.add_argument("--user-id")
    find.add_argument("--username")
    find.add_argument("--email")
    find.add_argument("--fb-id")
    find.add_argument("--phone")
    find.add_argument("--phone-prefix")

    create = sub.add_parser("create-user")
    create.add_argument("--username")
    create.add_argument("--password")
    create.add_argument("--email")
    create.add_argument("--phone-prefix")
    create.add_argument("--phone")

    delete = sub.add_parser("delete-user")
    delete.add_argument("--user-id", required=True)

    passwd = sub.add_parser("change-password")
    passwd.add_argument("--user-id", required=True)
    passwd.add_argument("--old-password", required=True)
    passwd.add_argument("--new-password", required=True)

    return parser


def main() -> None:
    """Command-line entry point."""
    config = load_settings(CLIENT_NAME)
    parser = build_parser(config)
    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    config = apply_flags(config, args)
    if not config.token_url:
        parser.error(f"Missing --{config.flag_prefix}token-url")

    try:
        client = create_trusted_client(config)
    except OAuthClientError as e:
        parser.error(str(e))

    try:
        with client:
            _dispatch(client, args)
    except RemoteError as e:
        tag = f" ({e.error_code})" if e.error_code else ""
        print(f"[oauth-cli] {args.cmd} rejected [{e.status_code}]{tag}: {e.message}", file=sys.stderr)
        sys.exit(1)
    except OAuthClientError as e:
        print(f"[oauth-cli] {args.cmd} failed: {e}", file=sys.stderr)
        sys.exit(1)


def _dispatch(client, args: argparse.Namespace) -> None:
    if args.cmd == "login":
        _emit(client.password_credentials_token(args.username, args.password))
    elif args.cmd == "refresh":
        _emit(client.refresh_token(args.refresh_token))
    elif args.cmd == "introspect":
        _emit(client.introspect(args.token))
    elif args.cmd == "find-user":
        if args.user_id:
            _emit(client.users.find_user_by_id(args.user_id))
        else:
            _emit(client.users.find_user(OAuthUserFilter(
                username=args.username,
                email=args.email,
                fb_id=args.fb_id,
                phone=args.phone,
                phone_prefix=args.phone_prefix,
            )))
    elif args.cmd == "create-user":
        _emit(client.users.create_user(OAuthUserCreate(
            username=args.username,
            password=args.password,
            email=args.email,
            phone_prefix=args.phone_prefix,
            phone=args.phone,
        )))
    elif args.cmd == "delete-user":
        client.users.delete_user(args.user_id)
        print(f"[oauth-cli] User '{args.user_id}' deleted", file=sys.stderr)
    elif args.cmd == "change-password":
        client.users.change_password(args.user_id, args.old_password, args.new_password)
        print(f"[oauth-cli] Password changed for '{args.user_id}'", file=sys.stderr)


if __name__ == "__main__":
    main()
