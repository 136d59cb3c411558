#!/usr/bin/env python3
"""
Game Server API -- login and inventory lookup behind signed bearer tokens.

Usage:
  python main.py serve
  python main.py serve --port 9000
  python main.py seed
  python main.py issue-token --user-id 1 --username player1
  python main.py verify-token eyJhbGciOi...
  python main.py verify-token "Bearer eyJhbGciOi..." --json

Environment variables (see core/config.py):
  SECRET_KEY            Token signing secret, at least 32 characters. Required unless DEBUG=true.
  DEBUG                 true = auto-generate SECRET_KEY for local development.
  TOKEN_EXPIRE_SECONDS  Token lifetime (default 86400).
  DATABASE_URL          SQLAlchemy URL (default: SQLite file next to the code).
"""

import argparse
import json
from datetime import datetime, timezone
from typing import Optional

from auth.store import UserStore
from auth.tokens import TokenError, TokenService
from core.config import get_settings
from inventory.seed import seed_sample_data
from inventory.store import InventoryStore


def _token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        settings.secret_key,
        expire_seconds=settings.token_expire_seconds,
        signature_first=settings.token_signature_first,
    )


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _cmd_seed(args: argparse.Namespace) -> int:
    settings = get_settings()
    users = UserStore(settings.database_url)
    items = InventoryStore(settings.database_url)
    try:
        if seed_sample_data(users, items):
            print("  Sample users and items created.")
        else:
            print("  [!] Database already has users -- nothing seeded.")
    finally:
        items.close()
        users.close()
    return 0


def _cmd_issue(args: argparse.Namespace) -> int:
    print(_token_service().issue(args.user_id, args.username))
    return 0


def _cmd_verify(args: argparse.Namespace) -> int:
    tokens = _token_service()
    try:
        identity = tokens.verify(args.token)
    except TokenError as exc:
        if args.json:
            print(json.dumps({"valid": False, "reason": exc.reason, "code": exc.code}))
        else:
            print(f"  [!] Token rejected: {exc.reason}")
        return 1

    exp = tokens.extract_claims(args.token).get("exp")
    expires = datetime.fromtimestamp(exp, tz=timezone.utc).isoformat()
    if args.json:
        print(
            json.dumps(
                {"valid": True, "userId": identity.user_id, "username": identity.username, "expiresAt": expires}
            )
        )
    else:
        print(f"  Valid token for {identity.username} (userId={identity.user_id}), expires {expires}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="gameserver",
        description="Game server API: player login and inventory lookup.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  DEBUG=true python main.py serve
  python main.py issue-token --user-id 1 --username player1
  python main.py verify-token "$TOKEN" --json
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: Settings.host)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: Settings.port, 8080)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    serve.set_defaults(func=_cmd_serve)

    seed = sub.add_parser("seed", help="Create the sample players and items if the database is empty")
    seed.set_defaults(func=_cmd_seed)

    issue = sub.add_parser("issue-token", help="Print a signed token for a user id and name")
    issue.add_argument("--user-id", type=int, required=True, metavar="ID")
    issue.add_argument("--username", required=True, metavar="NAME")
    issue.set_defaults(func=_cmd_issue)

    verify = sub.add_parser("verify-token", help="Check a token's signature and expiry")
    verify.add_argument("token", metavar="TOKEN", help='Raw token or "Bearer <token>"')
    verify.add_argument("--json", action="store_true", help="Output structured JSON")
    verify.set_defaults(func=_cmd_verify)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
