# tests/db_case.py
import unittest
import uuid
from datetime import date

from gameledger.core.auth import User
from gameledger.core.database import AsyncSessionLocal, Base, create_db_and_tables, engine
from gameledger.models.category import Category, EntryType
from gameledger.models.profile import Profile
from gameledger.models.transaction import Transaction


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh tables per test on the temporary SQLite database."""

    async def asyncSetUp(self):
        await create_db_and_tables()
        self.session = AsyncSessionLocal()

    async def asyncTearDown(self):
        await self.session.close()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()

    async def make_profile(self, **profile_fields) -> Profile:
        user_id = uuid.uuid4()
        self.session.add(User(
            id=user_id,
            email=f"{user_id.hex[:8]}@example.com",
            hashed_password="not-a-real-hash",
            is_active=True,
            is_superuser=False,
            is_verified=True,
        ))
        await self.session.flush()
        profile = Profile(id=user_id, **profile_fields)
        self.session.add(profile)
        await self.session.commit()
        await self.session.refresh(profile)
        return profile

    async def make_category(self, profile: Profile, name: str, type=EntryType.expense) -> Category:
        category = Category(user_id=profile.id, name=name, type=type, color="#123456")
        self.session.add(category)
        await self.session.commit()
        await self.session.refresh(category)
        return category

    async def add_expense(self, profile: Profile, amount: float, day: date, category: Category = None) -> Transaction:
        tx = Transaction(
            user_id=profile.id,
            amount=amount,
            type=EntryType.expense,
            date=day,
            category_id=category.id if category is not None else None,
            exp_gained=5,
        )
        self.session.add(tx)
        await self.session.commit()
        return tx
