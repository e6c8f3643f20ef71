#!/usr/bin/env python3
"""
Create an admin account, or promote an existing user to admin.

This is the only way an account gets the admin role; the public
registration endpoint always creates regular users.

Usage:
    python scripts/create_admin.py --username admin --email admin@example.com --password '...'
    python scripts/create_admin.py --username alice --promote

Missing arguments fall back to BOOTSTRAP_ADMIN_USERNAME / _EMAIL / _PASSWORD.
"""

import asyncio
import sys
import argparse
from pathlib import Path
from typing import Optional

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from eventqr.core.config import settings  # noqa: E402
from eventqr.core.database import close_db, get_session_local, init_db  # noqa: E402
from eventqr.core.exceptions import EventQRError  # noqa: E402
from eventqr.core.security import hash_password_async  # noqa: E402
from eventqr.models.user import UserRole  # noqa: E402
from eventqr.schemas.auth import PASSWORD_MIN_LENGTH  # noqa: E402
from eventqr.services.storage_service import storage_service  # noqa: E402


async def create_or_promote_admin(
    username: str,
    email: Optional[str],
    password: Optional[str],
    promote: bool = False,
) -> int:
    await init_db()
    session_factory = get_session_local()

    async with session_factory() as db:
        existing = await storage_service.get_user_by_username(db, username)

        if existing is not None:
            if not promote:
                print(f"[Admin] User '{username}' already exists. Use --promote to make them admin.")
                return 1
            changes = {"role": UserRole.ADMIN, "banned": False}
            if password:
                changes["password"] = await hash_password_async(password)
            await storage_service.update_user(db, existing.id, changes)
            print(f"[Admin] User '{username}' promoted to admin")
            return 0

        if promote:
            print(f"[Admin] User '{username}' not found")
            return 1

        if not email or not password:
            print("[Admin] --email and --password are required to create a new admin")
            return 1
        if len(password) < PASSWORD_MIN_LENGTH:
            print(f"[Admin] Password must be at least {PASSWORD_MIN_LENGTH} characters")
            return 1

        user = await storage_service.create_user(
            db,
            username=username,
            email=email,
            password_hash=await hash_password_async(password),
            role=UserRole.ADMIN,
        )
        print(f"[Admin] Admin user created: {user.username} ({user.email})")
        return 0


async def run(args: argparse.Namespace) -> int:
    try:
        return await create_or_promote_admin(args.username, args.email, args.password, args.promote)
    except EventQRError as e:
        print(f"[Admin] ERROR: {e.message}")
        return 1
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or promote an EventQR admin")
    parser.add_argument("--username", default=settings.BOOTSTRAP_ADMIN_USERNAME)
    parser.add_argument("--email", default=settings.BOOTSTRAP_ADMIN_EMAIL or None)
    parser.add_argument("--password", default=settings.BOOTSTRAP_ADMIN_PASSWORD or None)
    parser.add_argument("--promote", action="store_true", help="Promote an existing user")
    args = parser.parse_args()

    if not args.username:
        parser.error("--username is required (or set BOOTSTRAP_ADMIN_USERNAME)")

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
