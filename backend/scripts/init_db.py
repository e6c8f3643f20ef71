#!/usr/bin/env python3
"""
Database Initialization Script for EventQR

This script:
1. Tests database connectivity
2. Creates any missing tables
3. Shows table status

Usage:
    python scripts/init_db.py              # Full init
    python scripts/init_db.py --check      # Only check connectivity
    python scripts/init_db.py --tables     # Only create tables
    python scripts/init_db.py --status     # Only show table status
"""

import asyncio
import sys
import argparse
import traceback
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import inspect, text  # noqa: E402

from eventqr.core.config import settings  # noqa: E402
from eventqr.core.database import close_db, get_engine, init_db  # noqa: E402


def describe_target(db_url: str) -> str:
    """Connection target without credentials"""
    return db_url.split("@")[1] if "@" in db_url else db_url


async def test_connection() -> bool:
    """Test database connectivity"""
    print("\n[InitDB] Testing database connection...")
    print(f"[InitDB] Connecting to: {describe_target(settings.DATABASE_URL)}")

    try:
        async with get_engine().connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.fetchone()
        print("[InitDB] Database connection successful!")
        return True
    except Exception as e:
        print(f"[InitDB] ERROR: Database connection failed: {e}")
        return False


async def create_tables() -> bool:
    """Create database tables using SQLAlchemy"""
    print("\n[InitDB] Creating/verifying database tables...")

    try:
        await init_db()
        print("[InitDB] Database tables created/verified!")
        return True
    except Exception as e:
        print(f"[InitDB] ERROR: Table creation failed: {e}")
        traceback.print_exc()
        return False


async def show_table_status() -> None:
    """Show current table status"""
    print("\n[InitDB] Database Table Status:")
    print("-" * 50)

    def _collect(sync_conn):
        inspector = inspect(sync_conn)
        return {
            table: len(inspector.get_columns(table))
            for table in inspector.get_table_names()
        }

    try:
        async with get_engine().connect() as conn:
            tables = await conn.run_sync(_collect)
        print(f"Total tables: {len(tables)}")
        print("\nTables:")
        for table in sorted(tables):
            print(f"  - {table} ({tables[table]} columns)")
    except Exception as e:
        print(f"[InitDB] Could not inspect tables: {e}")


async def run(args: argparse.Namespace) -> int:
    try:
        if args.check:
            return 0 if await test_connection() else 1

        if args.status:
            await show_table_status()
            return 0

        if not await test_connection():
            return 1
        if not await create_tables():
            return 1
        if not args.tables:
            await show_table_status()
        return 0
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description="Initialize the EventQR database")
    parser.add_argument("--check", action="store_true", help="Only check connectivity")
    parser.add_argument("--tables", action="store_true", help="Only create tables")
    parser.add_argument("--status", action="store_true", help="Only show table status")
    args = parser.parse_args()

    print("=" * 50)
    print("EventQR - Database Initialization")
    print("=" * 50)

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
