"""
Create an account with any role (registration over HTTP always assigns Customer).
Run from project root:
  python -m kodbank.scripts.create_user USERNAME EMAIL PASSWORD [role] [--phone PHONE]
Example:
  python -m kodbank.scripts.create_user manager1 m1@kodbank.local your-secure-password Manager
"""
import argparse
import sys

from kodbank.core.database import SessionLocal
from kodbank.core.errors import DuplicateIdentity
from kodbank.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from kodbank.models import Role
from kodbank.services.accounts import register_account


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a Kodbank user.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.CUSTOMER.value,
        choices=[r.value for r in Role],
    )
    parser.add_argument("--phone", default=None, help="Optional phone number")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    db = SessionLocal()
    try:
        user = register_account(
            db,
            username=username,
            email=args.email.strip(),
            password=args.password,
            phone=args.phone,
            role=Role(args.role),
        )
        print(f"Created user '{username}' with role '{user.role.value}'.")
        return 0
    except DuplicateIdentity:
        print(f"User '{username}' or that email already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
