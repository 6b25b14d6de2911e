"""
Create an account (e.g. the first admin). Run from project root:
  python -m storeauth.scripts.create_user USERNAME EMAIL PASSWORD [--name NAME] [--phone PHONE] [--role admin|staff]
Example:
  python -m storeauth.scripts.create_user admin admin@example.com your-secure-password --role admin
"""
import argparse
import sys

from storeauth.core.config import get_settings
from storeauth.core.database import SessionLocal
from storeauth.core.errors import AuthError
from storeauth.core.logging import configure_logging
from storeauth.models import ROLE_VALUES
from storeauth.repositories import SqlAccountStore
from storeauth.services.accounts import AccountService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a store account without going through the API.")
    parser.add_argument("username", help="Username (unique)")
    parser.add_argument("email", help="Email address (unique, case-insensitive)")
    parser.add_argument("password", help="Password")
    parser.add_argument("--name", help="Display name (defaults to the username)")
    parser.add_argument("--phone", default=None)
    parser.add_argument("--role", default="staff", choices=sorted(ROLE_VALUES))
    args = parser.parse_args(argv)

    configure_logging(get_settings())
    db = SessionLocal()
    try:
        service = AccountService(SqlAccountStore(db))
        account = service.register(
            name=args.name or args.username,
            email=args.email,
            phone=args.phone,
            username=args.username,
            password=args.password,
            role=args.role,
        )
    except AuthError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{account.username}' (id={account.id}) with role '{account.role.value}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
