#!/usr/bin/env python3
"""Create an admin member directly in the configured database.

Usage:
  python scripts/bootstrap_admin.py --email admin@example.com --password strongpass

Environment fallbacks:
  BOOTSTRAP_ADMIN_NAME, BOOTSTRAP_ADMIN_EMAIL, BOOTSTRAP_ADMIN_PASSWORD, DATABASE_URL

Run ``alembic -c member_api/alembic.ini upgrade head`` first.
"""
from __future__ import annotations

import argparse
import os
import sys

from member_api.auth.bootstrap import ensure_bootstrap_admin
from member_api.config import get_settings
from member_api.db import dispose_engine


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Member API admin bootstrap")
    parser.add_argument("--name", default=os.getenv("BOOTSTRAP_ADMIN_NAME", "Administrator"))
    parser.add_argument("--email", default=os.getenv("BOOTSTRAP_ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("BOOTSTRAP_ADMIN_PASSWORD"))
    parser.add_argument("--quiet", action="store_true")
    return parser.parse_args()


def exit_with(message: str, code: int = 1) -> None:
    print(message, file=sys.stderr)
    raise SystemExit(code)


def main() -> None:
    args = parse_args()

    if not args.email or not args.password:
        exit_with("Missing admin credentials (use --email/--password or BOOTSTRAP_ADMIN_*)")
    if len(args.password) < 6:
        exit_with("Admin password must be at least 6 characters")

    settings = get_settings().model_copy(
        update={
            "bootstrap_admin_enabled": True,
            "bootstrap_admin_name": args.name,
            "bootstrap_admin_email": args.email,
            "bootstrap_admin_password": args.password,
        }
    )

    try:
        admin = ensure_bootstrap_admin(settings)
    finally:
        dispose_engine()

    if args.quiet:
        return
    if admin is None:
        print("Email already registered; bootstrap skipped")
    else:
        print(f"Admin created with id {admin.id}")


if __name__ == "__main__":
    main()
