#!/usr/bin/env python3
# scripts/create_admin.py - Create an admin account or reset its password
import argparse
import getpass
import os
import sys

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from club_selection.core.db import db_manager
from club_selection.services.admin_service import AdminService


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create or reset a club-selection admin account")
    parser.add_argument("username", help="Admin login name")
    parser.add_argument("--password", help="Password (prompted for when omitted)")
    parser.add_argument("--name", help="Display name")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (development databases without migrations)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("❌ Password cannot be empty")
        return 1

    if args.create_tables:
        db_manager.create_all()

    with db_manager.transaction() as session:
        admin = AdminService(session).upsert_admin(args.username, password, name=args.name)
        print(f"✅ Admin account saved: {admin.username} ({admin.id})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
