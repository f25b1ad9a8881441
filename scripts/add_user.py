#!/usr/bin/env python3
"""
Create a user (and optionally an empty card) directly in the database.

Usage:
  python scripts/add_user.py --email ana@example.com --username ana --password secret123 [--card]
"""
from __future__ import annotations

import argparse
import sys

from workinfo.core.security import hash_password
from workinfo.domain.contact import is_valid_email
from workinfo.domain.usernames import is_valid_username, normalize_username
from workinfo.repositories.sql_repository import SQLRepository


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a WorkInfo user")
    ap.add_argument("--email", required=True)
    ap.add_argument("--username", required=True, help="3-20 chars [a-zA-Z0-9_]")
    ap.add_argument("--password", required=True)
    ap.add_argument("--card", action="store_true", help="Also create an empty active card")
    args = ap.parse_args()

    repo = SQLRepository()
    email = (args.email or "").strip()
    if not is_valid_email(email):
        raise SystemExit("Invalid email")
    if not is_valid_username(args.username):
        raise SystemExit("Invalid username (use 3-20 chars [a-zA-Z0-9_])")
    username = normalize_username(args.username)
    if repo.username_exists(username):
        raise SystemExit(f"Username '{username}' is already taken")
    if repo.get_user_by_email(email):
        raise SystemExit(f"User '{email}' already exists")
    if len(args.password) < 8:
        raise SystemExit("Password must be at least 8 characters long")

    user = repo.create_user(email, username, hash_password(args.password))
    print("OK: user created")
    print(f"  id: {user.id}")
    print(f"  username: {user.username}")
    if args.card:
        card = repo.create_card(user.id, user.username)
        print(f"  card: {card.id}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
