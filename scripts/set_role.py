#!/usr/bin/env python3
"""
Move a user between the FREE and PRO tiers.

Usage:
  python scripts/set_role.py --email someone@example.com --role PRO
"""
from __future__ import annotations

import argparse
import sys

from todo_api.db.create_tables import init_db
from todo_api.domain.identity import DEFAULT_ROLES, ROLE_FREE, ROLE_PRO
from todo_api.repositories.role_store import RoleStore
from todo_api.repositories.user_store import UserStore


def main() -> None:
    ap = argparse.ArgumentParser(description="Assign the FREE or PRO role to a user")
    ap.add_argument("--email", required=True, help="Email of an existing user")
    ap.add_argument("--role", required=True, choices=list(DEFAULT_ROLES), type=str.upper)
    args = ap.parse_args()

    init_db()
    users = UserStore()
    roles = RoleStore()
    user = users.find_by_email(args.email)
    if not user:
        raise SystemExit(f"User '{args.email}' does not exist")

    other = ROLE_FREE if args.role == ROLE_PRO else ROLE_PRO
    roles.remove_user_from_role(user, other)
    if not roles.is_in_role(user, args.role):
        result = roles.add_user_to_role(user, args.role)
        if not result.succeeded:
            raise SystemExit(f"Role assignment failed: {result.error_dicts()}")
    print("OK: role updated")
    print(f"  User: {user.email}")
    print(f"  Roles: {', '.join(roles.roles_for_user(user))}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
