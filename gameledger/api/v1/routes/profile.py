# gameledger/api/v1/routes/profile.py
import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi_users import BaseUserManager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gameledger.core.auth import get_user_manager, User
from gameledger.core.database import get_async_session
from gameledger.api.deps import get_current_user, get_current_profile
from gameledger.crud.badge import get_all_badges, get_user_badges
from gameledger.crud.profile import get_profile_by_username, update_profile, save_profile
from gameledger.models.profile import Profile
from gameledger.schemas.badge import BadgeProgress
from gameledger.schemas.profile import GameStats, ProfileRead, ProfileUpdate
from gameledger.utils.gamification import build_game_stats
from gameledger.utils.storage import AvatarStorage, FileTooLarge, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])

def get_avatar_storage() -> AvatarStorage:
    return AvatarStorage()

def to_profile_read(profile: Profile, user: User) -> ProfileRead:
    data = ProfileRead.model_validate(profile)
    data.email = user.email
    return data

# 1) GET /profile/me
@router.get("/me", response_model=ProfileRead)
async def read_own_profile(
    user: User = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile),
):
    """Get current user's profile with game stats"""
    return to_profile_read(profile, user)

# 2) PATCH /profile/me
@router.patch("/me", response_model=ProfileRead)
async def update_own_profile(
    profile_in: ProfileUpdate,
    user: User = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    """Update username and display name"""
    update_dict = profile_in.model_dump(exclude_unset=True)
    if not update_dict:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update"
        )

    username = update_dict.get("username")
    if username and username != profile.username:
        taken_by = await get_profile_by_username(username, db)
        if taken_by is not None and taken_by.id != profile.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already in use")

    try:
        profile = await update_profile(profile, profile_in, db)
    except IntegrityError:
        # Lost a race for the same username
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already in use")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Profile update failed for {profile.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while updating profile"
        )
    return to_profile_read(profile, user)

# 3) DELETE /profile/me
@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_own_account(
    user: User = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile),
    user_manager: BaseUserManager[User, uuid.UUID] = Depends(get_user_manager),
    db: AsyncSession = Depends(get_async_session),
    storage: AvatarStorage = Depends(get_avatar_storage),
):
    """Delete current user's account permanently, with everything it owns"""
    avatar_url, email = profile.avatar_url, user.email
    try:
        await user_manager.delete(user)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Account deletion failed for {email}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while deleting account"
        )
    await run_in_threadpool(storage.delete, avatar_url)
    logger.info(f"Account {email} deleted")
    return None

# 4) GET /profile/me/stats
@router.get("/me/stats", response_model=GameStats)
async def read_game_stats(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    return await build_game_stats(profile, db)

# 5) GET /profile/me/badges
@router.get("/me/badges", response_model=List[BadgeProgress])
async def read_badges(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    """Full badge catalog, flagged with what the user has earned"""
    earned = {ub.badge_id: ub.earned_at for ub in await get_user_badges(profile.id, db)}
    result = []
    for badge in await get_all_badges(db):
        item = BadgeProgress.model_validate(badge)
        item.earned = badge.id in earned
        item.earned_at = earned.get(badge.id)
        result.append(item)
    return result

# 6) POST /profile/me/avatar
@router.post("/me/avatar", response_model=ProfileRead)
async def upload_avatar(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
    storage: AvatarStorage = Depends(get_avatar_storage),
):
    # Read one byte past the cap so oversized files are detected without reading them whole
    data = await file.read(storage.max_bytes + 1)
    try:
        url = await run_in_threadpool(storage.upload, profile.id, file.content_type, data)
    except FileTooLarge as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    profile_id, previous_url = profile.id, profile.avatar_url
    profile.avatar_url = url
    try:
        profile = await save_profile(profile, db)
    except SQLAlchemyError as e:
        await db.rollback()
        await run_in_threadpool(storage.delete, url)
        logger.error(f"❌ Avatar update failed for {profile_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while saving avatar"
        )

    # Only drop the old file once nothing points at it
    await run_in_threadpool(storage.delete, previous_url)
    return to_profile_read(profile, user)

# 7) DELETE /profile/me/avatar
@router.delete("/me/avatar", response_model=ProfileRead)
async def remove_avatar(
    user: User = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
    storage: AvatarStorage = Depends(get_avatar_storage),
):
    profile_id, previous_url = profile.id, profile.avatar_url
    profile.avatar_url = None
    try:
        profile = await save_profile(profile, db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Avatar removal failed for {profile_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while removing avatar"
        )

    await run_in_threadpool(storage.delete, previous_url)
    return to_profile_read(profile, user)
