"""
Initialise the administrator account.
Creates the default admin used for the first login.
"""
import asyncio

from sqlalchemy import select

from arcade_admin.db.models import Account
from arcade_admin.infrastructure.database.session import get_session, init_db
from arcade_admin.modules.accounts.models import AccountCreateInput, Role
from arcade_admin.modules.accounts.service import AccountService


async def create_default_admin():
    """Create the default admin account if none exists."""
    await init_db()

    async for db in get_session():
        stmt = select(Account).where(Account.role == Role.ADMIN.value).limit(1)
        result = await db.execute(stmt)
        existing_admin = result.scalar_one_or_none()

        if existing_admin:
            print(f"Admin account already exists ({existing_admin.username}), nothing to do")
            return

        service = AccountService.with_session(db)

        account = await service.create_account(
            AccountCreateInput(
                username="admin",
                password="admin123",
                role=Role.ADMIN.value,
                email="admin@example.com",
                is_active=True,
            )
        )
        await db.commit()

        print("=" * 50)
        print("Default admin account created")
        print("=" * 50)
        print(f"Username: {account.username}")
        print("Password: admin123")
        print(f"Unique ID: {account.unique_id}")
        print("=" * 50)
        print("Change the password after the first login!")
        print("=" * 50)


if __name__ == "__main__":
    asyncio.run(create_default_admin())
