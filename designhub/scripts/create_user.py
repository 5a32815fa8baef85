"""
Create a user (e.g. the first admin). Run from project root:
  python -m designhub.scripts.create_user EMAIL PASSWORD NAME [role]
Example:
  python -m designhub.scripts.create_user admin@example.com your-secure-password "Site Admin" ADMIN
"""
import argparse
import sys

from designhub.core.config import get_settings
from designhub.core.database import Database
from designhub.core.security import hash_password
from designhub.models import Role, User


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a DesignHub user account.")
    parser.add_argument("email", help="Login email, stored as given (matched exactly at login)")
    parser.add_argument("password", help="Password")
    parser.add_argument("name", help="Display name")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.CLIENT.value,
        type=str.upper,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)

    email = args.email
    if not email or not args.password or not args.name:
        print("Email, password and name are required.", file=sys.stderr)
        return 1

    database = Database(get_settings().DATABASE_URL)
    db = database.session()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            email=email,
            password_hash=hash_password(args.password),
            name=args.name,
            role=args.role,
        )
        db.add(user)
        db.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
