"""
Register a member from the command line (e.g. the first admin). Run from project root:
  python -m coop_members.scripts.create_member FIRST LAST EMAIL PASSWORD [--admin]
Example:
  python -m coop_members.scripts.create_member Alice Doe alice@example.com your-secure-password --admin
Prints the issued access token on success.
"""
import argparse
import logging
import sys

from coop_members.core.database import SessionLocal
from coop_members.core.exceptions import DuplicateEmail, InvalidInput
from coop_members.core.tokens import get_issuer
from coop_members.services.auth import register

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Register a co-op member.")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    parser.add_argument("email", help="Login email (unique)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("--admin", action="store_true", help="Grant the admin role")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        capability = register(
            db,
            get_issuer(),
            first_name=args.first_name,
            last_name=args.last_name,
            email=args.email,
            password=args.password,
            is_admin=args.admin,
        )
    except (InvalidInput, DuplicateEmail) as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created member {capability.subject_id} ({args.email}) with role '{capability.role}'.")
    print(capability.token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
