"""Moderate directory submissions from the command line.

Runs against DATABASE_URL directly, so it does not need the admin key.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from townlink.db import session_scope
from townlink.errors import DirectoryError
from townlink.moderation import approve_business, list_for_admin, reject_business, remove_business


def main() -> int:
    parser = argparse.ArgumentParser(description="Approve, reject or delete directory businesses")
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List businesses")
    list_parser.add_argument("--status", default="pending", help="pending, approved or all")
    list_parser.add_argument("--category", default=None)

    for name, help_text in (
        ("approve", "Make a business public"),
        ("reject", "Reset a business to pending"),
        ("delete", "Delete a business and its reviews"),
    ):
        action_parser = sub.add_parser(name, help=help_text)
        action_parser.add_argument("business_id", type=int)

    args = parser.parse_args()

    try:
        with session_scope() as session:
            if args.command == "list":
                status = None if args.status == "all" else args.status
                result = list_for_admin(session, status=status, category=args.category)
            elif args.command == "approve":
                result = approve_business(session, args.business_id)
            elif args.command == "reject":
                result = reject_business(session, args.business_id)
            else:
                result = remove_business(session, args.business_id)
    except DirectoryError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
