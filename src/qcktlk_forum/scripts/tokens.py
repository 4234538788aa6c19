# src/qcktlk_forum/scripts/tokens.py
"""
Developer helper for working against a local forum API.

Mints identity tokens signed with the local SECRET_KEY and can promote an
account to the admin role:

  python -m qcktlk_forum.scripts.tokens alice@example.com --name Alice
  python -m qcktlk_forum.scripts.tokens root@example.com --make-admin
"""

from __future__ import annotations

import argparse
from datetime import timedelta

from sqlalchemy.orm import Session

from qcktlk_forum.db.session import SessionLocal
from qcktlk_forum.models.user import ROLE_ADMIN
from qcktlk_forum.services.identity import create_identity_token
from qcktlk_forum.services.users import get_or_create_profile

SECONDS_PER_HOUR = 3_600


def promote_to_admin(db: Session, email: str) -> None:
    """Give `email` the admin role, creating the profile if needed."""
    user = get_or_create_profile(db, email)
    user.role = ROLE_ADMIN
    db.commit()
    print(f"Promoted {email} to admin")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mint local identity tokens")
    parser.add_argument("email", help="Email address carried by the token")
    parser.add_argument("--name", default=None, help="Display name claim")
    parser.add_argument(
        "--hours",
        type=int,
        default=24,
        help="Token lifetime in hours (default: 24)",
    )
    parser.add_argument(
        "--make-admin",
        action="store_true",
        help="Also grant the admin role to this account",
    )
    args = parser.parse_args(argv)

    email = args.email.strip().lower()
    if args.make_admin:
        db = SessionLocal()
        try:
            promote_to_admin(db, email)
        finally:
            db.close()

    token = create_identity_token(
        email,
        name=args.name,
        expires_in=timedelta(seconds=args.hours * SECONDS_PER_HOUR),
    )
    print(token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
