"""Admin privilege management for user accounts.

Admin privileges are never granted or revoked through the user resource;
this CLI is the dedicated operation for it (and for bootstrapping the first
admin account).
"""
from __future__ import annotations
import argparse
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from objectapi.config import load_settings
from objectapi.core import audit
from objectapi.core.db import get_connection, init_schema
from objectapi.core.exceptions import DuplicationError
from objectapi.core.models import User
from objectapi.core.repository import UserRepository
from objectapi.core.request_context import resolve_requested_object


def _find_user(repository: UserRepository, ref: str) -> User | None:
    """Resolve an id or e-mail given on the command line."""
    identifier = resolve_requested_object(ref)
    if identifier is None:
        return None
    return repository.load(identifier)


def _print_user(user: User) -> None:
    role = "admin" if user.is_admin() else "user"
    print(f"{user.id}\t{user.email}\t{user.nick}\t{role}")


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    settings = load_settings()

    parser = argparse.ArgumentParser(description="User admin privilege helper")
    parser.add_argument("--db", default=settings.database_path, help="Database path")
    parser.add_argument("--operator", default=os.environ.get("USER", "cli"),
                        help="Operator identifier for audit logs")

    sub = parser.add_subparsers(dest="cmd")

    sc = sub.add_parser("create-admin")
    sc.add_argument("--email", required=True)
    sc.add_argument("--nick", required=True)
    sc.add_argument("--password", required=True)

    sg = sub.add_parser("grant")
    sg.add_argument("--user", required=True, help="User id or e-mail")

    sr = sub.add_parser("revoke")
    sr.add_argument("--user", required=True, help="User id or e-mail")

    ss = sub.add_parser("show")
    ss.add_argument("--user", required=True, help="User id or e-mail")

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 1

    conn = get_connection(args.db)
    try:
        init_schema(conn)
        repository = UserRepository(conn)

        if args.cmd == "create-admin":
            try:
                user = repository.create_user(args.email, args.nick, args.password)
            except DuplicationError:
                print(f"[admin] E-mail '{args.email}' is taken by another user", file=sys.stderr)
                return 1
            repository.set_admin(user, True)
            _audit("grant_admin", user, args.operator, settings)
            _print_user(user)
            return 0

        user = _find_user(repository, args.user)
        if user is None:
            print(f"[admin] User '{args.user}' not found", file=sys.stderr)
            return 1

        if args.cmd == "grant":
            repository.set_admin(user, True)
            _audit("grant_admin", user, args.operator, settings)
        elif args.cmd == "revoke":
            repository.set_admin(user, False)
            _audit("revoke_admin", user, args.operator, settings)

        _print_user(user)
        return 0
    finally:
        conn.close()


def _audit(event_type, user: User, operator: str, settings) -> None:
    audit.safe_log_user_event(
        event_type,
        user.email,
        audit_dir=settings.audit_log_dir,
        signing_key=settings.audit_log_signing_key,
        operator=operator,
        details={"user_id": user.id},
    )


if __name__ == "__main__":
    sys.exit(main())
