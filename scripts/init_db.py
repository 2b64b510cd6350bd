"""Create the clinic tables and, optionally, a first admin account.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --admin-email admin@clinic.com --admin-password secret123
"""

import argparse
import asyncio

from clinic.database import AsyncSessionLocal, engine
from clinic.models import metadata
from clinic.schemas.common import UserRole
from clinic.schemas.users import UserCreate
from clinic.services.user_service import UserService


async def init_db(admin_email: str | None, admin_password: str | None) -> None:
    """Create all tables and seed the admin user when requested."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    print("✓ Database initialized successfully!")

    if admin_email and admin_password:
        service = UserService()
        async with AsyncSessionLocal() as db:
            if await service.get_user_by_email(db, admin_email):
                print(f"• Admin {admin_email} already exists")
            else:
                await service.create_user(
                    db,
                    UserCreate(
                        email=admin_email,
                        name="Administrator",
                        password=admin_password,
                        role=UserRole.ADMIN,
                    ),
                )
                print(f"✓ Admin {admin_email} created")

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the clinic database")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args()

    asyncio.run(init_db(args.admin_email, args.admin_password))
