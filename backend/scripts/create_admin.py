# backend/scripts/create_admin.py
"""
Create an admin account, or promote an existing user to admin.

Usage:
    python -m scripts.create_admin --email admin@linkoja.com --password secret123 --name "Site Admin"

Email and password may also come from LINKOJA_ADMIN_EMAIL / LINKOJA_ADMIN_PASSWORD.
"""
import argparse
import logging
import os
import sys

from linkoja.auth import get_password_hash
from linkoja.db import SessionLocal, Base, engine
from linkoja.enums import AuthProvider, UserRole
from linkoja.models import User

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create or promote a Linkoja admin user")
    parser.add_argument("--email", default=os.environ.get("LINKOJA_ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("LINKOJA_ADMIN_PASSWORD"))
    parser.add_argument("--name", default="Admin")
    return parser.parse_args(argv)


def ensure_admin(db, email: str, password: str, name: str = "Admin") -> User:
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user:
        user.role = UserRole.ADMIN
        logger.info(f"Promoted existing user {email} to admin")
    else:
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            name=name,
            role=UserRole.ADMIN,
            auth_provider=AuthProvider.LOCAL,
        )
        db.add(user)
        logger.info(f"Created admin user {email}")
    db.commit()
    db.refresh(user)
    return user


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = parse_args(argv)
    if not args.email or not args.password:
        logger.error("Both --email and --password are required")
        return 1
    if len(args.password) < 6:
        logger.error("Password must be at least 6 characters")
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = ensure_admin(db, args.email, args.password, args.name)
        print(f"Admin ready: id={user.id} email={user.email}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
