"""
Seed a development database with two admins and three staff accounts:

  python -m storeauth.scripts.seed_users [--admin-password PW] [--staff-password PW]

Accounts whose email or username already exist are skipped, so the script is
safe to run repeatedly.
"""

import argparse
import logging
import sys

from sqlalchemy.orm import Session

from storeauth.core.config import get_settings
from storeauth.core.database import SessionLocal
from storeauth.core.errors import ConflictError
from storeauth.core.logging import configure_logging
from storeauth.models import Role
from storeauth.repositories import SqlAccountStore
from storeauth.services.accounts import AccountService

logger = logging.getLogger(__name__)

SEED_ACCOUNTS: list[tuple[str, str, Role]] = [
    ("admin1", "Admin One", Role.ADMIN),
    ("admin2", "Admin Two", Role.ADMIN),
    ("staff1", "Staff One", Role.STAFF),
    ("staff2", "Staff Two", Role.STAFF),
    ("staff3", "Staff Three", Role.STAFF),
]


def seed_users(db: Session, admin_password: str, staff_password: str) -> tuple[int, int]:
    """Create the seed accounts. Returns (created, skipped)."""
    service = AccountService(SqlAccountStore(db))
    created = skipped = 0
    for username, name, role in SEED_ACCOUNTS:
        password = admin_password if role is Role.ADMIN else staff_password
        try:
            service.register(
                name=name,
                email=f"{username}@example.com",
                username=username,
                password=password,
                role=role,
            )
            created += 1
        except ConflictError:
            logger.info("Seed account already exists; skipping", extra={"username": username})
            skipped += 1
    return created, skipped


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed admin and staff accounts for development.")
    parser.add_argument("--admin-password", default="admin123")
    parser.add_argument("--staff-password", default="staff123")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)
    if settings.APP_ENV == "prod":
        logger.error("Refusing to seed well-known accounts when APP_ENV=prod")
        return 1

    db = SessionLocal()
    try:
        created, skipped = seed_users(db, args.admin_password, args.staff_password)
        logger.info("Seeding completed: created=%s skipped=%s", created, skipped)
        return 0
    except Exception as e:
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
