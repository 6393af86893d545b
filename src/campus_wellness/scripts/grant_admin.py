"""Grant or revoke admin authority from the command line.

Admins cannot be created through the API; the first one is bootstrapped
here and can then manage departments and moderators.
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from campus_wellness.db.session import SessionLocal
from campus_wellness.repositories.authority_repo import AuthorityRepository


def grant(user_id: str, email: str | None) -> None:
    with SessionLocal() as db:
        AuthorityRepository(db).grant_admin(user_id, email.strip().lower() if email else None)
        db.commit()
    print(f"[grant_admin] {user_id} is an admin")


def revoke(user_id: str) -> bool:
    with SessionLocal() as db:
        removed = AuthorityRepository(db).revoke_admin(user_id)
        db.commit()
    if removed:
        print(f"[grant_admin] {user_id} is no longer an admin")
    else:
        print(f"[grant_admin] {user_id} was not an admin")
    return removed


def main() -> None:
    parser = argparse.ArgumentParser(description="Grant or revoke admin authority")
    parser.add_argument("user_id", help="Stable user id issued by the identity provider")
    parser.add_argument("--email", default=None, help="Verified email, kept for reference")
    parser.add_argument(
        "--revoke",
        action="store_true",
        help="Remove the admin record instead of creating it.",
    )
    args = parser.parse_args()

    try:
        if args.revoke:
            revoke(args.user_id)
        else:
            grant(args.user_id, args.email)
    except SQLAlchemyError as exc:
        print(f"[grant_admin] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
