#!/usr/bin/env python3
"""CLI tool for registering a dashboard user directly in the database.

Used to bootstrap the first admin, since POST /dashboard/user itself
requires a valid token.
"""

from __future__ import annotations

import argparse
import getpass
import sys

from sqlmodel import Session

import inkpost.models  # noqa: F401  registers SQLModel tables
from inkpost.db import create_db_and_tables, engine
from inkpost.errors import CriticalError, UsernameTaken
from inkpost.services.credentials import CredentialStore


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Register a dashboard user (always an admin for now)."
    )
    parser.add_argument("--login", "-l", required=True, help="Login name")
    parser.add_argument(
        "--password-stdin",
        action="store_true",
        help="Read the password from stdin instead of prompting",
    )
    args = parser.parse_args()

    if args.password_stdin:
        password = sys.stdin.readline().rstrip("\n")
    else:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            print("ERROR: passwords do not match", file=sys.stderr)
            return 1
    if not password:
        print("ERROR: empty password", file=sys.stderr)
        return 1

    create_db_and_tables()
    with Session(engine) as session:
        try:
            user = CredentialStore(session).register(args.login, password)
        except UsernameTaken:
            print(f"ERROR: login {args.login!r} is already taken", file=sys.stderr)
            return 1
        except CriticalError as exc:
            print(f"ERROR: {exc.message}", file=sys.stderr)
            return 1

    print(f"Created user {user.login!r} (id={user.id}, admin={user.is_admin})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
