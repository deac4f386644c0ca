#!/usr/bin/env python3
"""
Create the default administrator account.

Usage:
    python scripts/create_admin.py --email admin@saylani.com --cnic 00000-0000000-0

The password is read from ADMIN_PASSWORD or prompted for. Running the script
again for an existing email leaves that account untouched.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from qarz_portal.core import hash_password, is_valid_password  # noqa: E402
from qarz_portal.database.connection import init_db  # noqa: E402
from qarz_portal.database.models import User  # noqa: E402

logger = logging.getLogger("create_admin")


async def create_admin(email: str, cnic: str, name: str, password: str) -> bool:
    await init_db()

    existing = await User.find_one(User.email == email.lower())
    if existing:
        logger.info("Admin account %s already exists", email)
        return False

    admin = User(
        cnic=cnic,
        email=email.lower(),
        name=name,
        hashed_password=hash_password(password),
        is_admin=True,
        is_first_login=False,
    )
    await admin.insert()
    logger.info("Admin account %s created with ID %s", admin.email, admin.id)
    return True


def main():
    parser = argparse.ArgumentParser(description="Create the portal administrator account")
    parser.add_argument("--email", default="admin@saylani.com")
    parser.add_argument("--cnic", default="00000-0000000-0")
    parser.add_argument("--name", default="Saylani Admin")
    args = parser.parse_args()

    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
    if not is_valid_password(password):
        parser.error("Password must be at least 6 characters long")

    asyncio.run(create_admin(args.email, args.cnic, args.name, password))


if __name__ == "__main__":
    main()
