"""
Assign a role to an existing account, e.g. to bootstrap the first admin.

Usage:
    python set_role.py doctor@example.org admin
"""
import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent
load_dotenv(PROJECT_ROOT / ".env")

from greedoc.core.firebase import init_firebase  # noqa: E402
from greedoc.services import user_service  # noqa: E402

ROLES = ("doctor", "patient", "admin")


def set_role(email: str, role: str) -> dict:
    if role not in ROLES:
        raise ValueError(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}")

    user = user_service.find_by_email(email)
    if user is None:
        raise LookupError(f"No user with email {email}")

    return user_service.update_user(user["id"], {"role": role})


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Set a Greedoc user's role")
    parser.add_argument("email")
    parser.add_argument("role", choices=ROLES)
    args = parser.parse_args(argv)

    init_firebase()
    try:
        user = set_role(args.email, args.role)
    except LookupError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Role '{user['role']}' set for {user['email']} (id {user['id']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
