#!/usr/bin/env python3
"""
credcore -- account registration and HS512 bearer token issuance.

Usage:
  python main.py genkey
  python main.py create-user --email x@y.com --display-name "X Y" --password Secret1
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 5000

Environment variables:
  TOKEN_KEY      Signing key for issued tokens. At least 64 bytes. Generate
                 one with `python main.py genkey`.
  DATABASE_URL   SQLAlchemy URL of the user store (default sqlite:///credcore.db).
  DEBUG          true to auto-generate a throwaway TOKEN_KEY when none is set.
"""

import argparse
import secrets
import sys

from auth.accounts import register_account
from auth.errors import ConfigurationError, DuplicateEmailError
from auth.store import UserStore
from auth.tokens import MIN_KEY_BYTES, TokenIssuer
from core.config import get_settings

EXIT_CONFIG_ERROR = 2


def _cmd_genkey(args: argparse.Namespace) -> int:
    # token_urlsafe(n) yields about 1.3 characters per byte, all ASCII.
    print(secrets.token_urlsafe(args.bytes))
    return 0


def _cmd_create_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        issuer = TokenIssuer.configure(settings.token_key)
    except ConfigurationError as e:
        print(f"  [!] {e.message} Set TOKEN_KEY (see `python main.py genkey`).", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    store = UserStore(settings.database_url)
    try:
        user, token = register_account(store, issuer, args.display_name, args.email, args.password)
    except DuplicateEmailError:
        print(f"  [!] '{args.email}' is already registered.", file=sys.stderr)
        return 1
    finally:
        store.close()

    print(f"  id:    {user.id}")
    print(f"  email: {user.email}")
    print(f"  token: {token.encoded}")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    # Fail here with a readable message instead of a lifespan traceback.
    try:
        TokenIssuer.configure(settings.token_key)
    except ConfigurationError as e:
        print(f"  [!] {e.message} Set TOKEN_KEY (see `python main.py genkey`).", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credcore",
        description="Account registration and HS512 bearer token issuance.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    genkey = sub.add_parser("genkey", help="Print a fresh random TOKEN_KEY")
    genkey.add_argument(
        "--bytes",
        type=int,
        default=MIN_KEY_BYTES,
        help=f"Random bytes of entropy (default {MIN_KEY_BYTES})",
    )
    genkey.set_defaults(func=_cmd_genkey)

    create = sub.add_parser("create-user", help="Register a user and print a token")
    create.add_argument("--email", required=True)
    create.add_argument("--display-name", required=True)
    create.add_argument("--password", required=True)
    create.set_defaults(func=_cmd_create_user)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "genkey" and args.bytes < MIN_KEY_BYTES:
        print(f"  [!] --bytes must be at least {MIN_KEY_BYTES}.", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
