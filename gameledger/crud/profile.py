# gameledger/crud/profile.py
import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from gameledger.models.profile import Profile
from gameledger.schemas.profile import ProfileUpdate

logger = logging.getLogger(__name__)

async def get_profile(user_id: uuid.UUID, db: AsyncSession) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()

async def get_profile_by_username(username: str, db: AsyncSession) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.username == username))
    return result.scalar_one_or_none()

async def create_profile_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    full_name: Optional[str] = None,
    username: Optional[str] = None,
) -> Profile:
    """Create the profile row that carries game stats, budget and onboarding state.

    A taken username does not block registration: the profile is created
    without one and the user can pick another later.
    """
    if username and await get_profile_by_username(username, db) is not None:
        logger.warning(f"Username {username} already taken, creating profile {user_id} without it")
        username = None
    profile = Profile(id=user_id, full_name=full_name, username=username)
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    logger.info(f"✅ Profile created for user {user_id}")
    return profile

async def get_or_create_profile(user_id: uuid.UUID, db: AsyncSession) -> Profile:
    """Users registered before profiles existed get one lazily."""
    profile = await get_profile(user_id, db)
    if profile is None:
        profile = await create_profile_for_user(user_id, db)
    return profile

async def update_profile(profile: Profile, profile_in: ProfileUpdate, db: AsyncSession) -> Profile:
    for field, value in profile_in.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile

async def save_profile(profile: Profile, db: AsyncSession) -> Profile:
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile
