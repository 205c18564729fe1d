#!/usr/bin/env python3
"""
Standalone script to create a superuser for the Game Ledger API.
The usual registration hook runs too, so the account gets a profile and
the default categories.
Usage: python create_superuser.py
"""

import asyncio
import getpass
import logging

from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase
from fastapi_users.exceptions import InvalidPasswordException, UserAlreadyExists

from gameledger.core.auth import OAuthAccount, User, UserManager, UserCreate
from gameledger.core.database import AsyncSessionLocal, create_db_and_tables, engine
from gameledger.crud.badge import seed_badges

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def create_superuser():
    print("Creating superuser...")

    email = input("Enter superuser email: ") or "admin@example.com"
    password = getpass.getpass("Enter superuser password: ")
    full_name = input("Enter full name (optional): ") or "System Administrator"

    await create_db_and_tables()

    async with AsyncSessionLocal() as session:
        try:
            await seed_badges(session)

            user_db = SQLAlchemyUserDatabase(session, User, OAuthAccount)
            user_manager = UserManager(user_db)

            user_create = UserCreate(
                email=email,
                password=password,
                full_name=full_name,
                is_superuser=True,
                is_verified=True
            )

            superuser = await user_manager.create(user_create)
            print("✅ Superuser created successfully!")
            print(f"📧 Email: {superuser.email}")
            print(f"🔑 ID: {superuser.id}")

        except UserAlreadyExists:
            print(f"User with email {email} already exists!")
        except InvalidPasswordException as e:
            print(f"❌ Invalid password: {e.reason}")
        finally:
            await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_superuser())
