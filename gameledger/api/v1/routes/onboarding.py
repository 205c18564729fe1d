# gameledger/api/v1/routes/onboarding.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from gameledger.core.config import settings
from gameledger.core.database import get_async_session
from gameledger.api.deps import get_current_profile
from gameledger.crud.category import (
    RECOMMENDED_CATEGORIES,
    create_category_for_user,
    delete_category,
    get_categories_for_user,
    get_category_by_id,
    get_category_by_name_for_user,
    get_recommended_category,
)
from gameledger.crud.profile import save_profile
from gameledger.models.profile import Profile
from gameledger.schemas.category import CategoryCreate, CategoryRead, RecommendedCategory
from gameledger.schemas.onboarding import OnboardingCompletion, OnboardingGoal, OnboardingStateRead
from gameledger.schemas.transaction import TransactionCreate, TransactionCreated
from gameledger.utils import onboarding as wizard
from gameledger.utils.transactions import record_transaction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

class CategoryStepRead(BaseModel):
    categories: List[CategoryRead]
    recommended: List[RecommendedCategory]

def to_state(profile: Profile) -> OnboardingStateRead:
    step = profile.onboarding_step or 0
    return OnboardingStateRead(
        active=wizard.is_active(profile),
        step=step,
        step_name=wizard.step_name(step),
        total_steps=wizard.TOTAL_STEPS,
        completed=bool(profile.onboarding_completed),
        skipped=bool(profile.onboarding_skipped),
        completed_at=profile.onboarding_completed_at,
    )

def _conflict(e: wizard.OnboardingError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.get("", response_model=OnboardingStateRead)
async def read_onboarding_state(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    """Current wizard state; brand-new accounts are dropped into step 1."""
    if wizard.should_auto_start(profile, settings.ONBOARDING_AUTO_START_MINUTES):
        wizard.start(profile)
        profile = await save_profile(profile, db)
        logger.info(f"🎮 Onboarding auto-started for {profile.id}")
    return to_state(profile)

@router.post("/start", response_model=OnboardingStateRead)
async def start_onboarding(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    wizard.start(profile)
    return to_state(await save_profile(profile, db))

@router.post("/next", response_model=OnboardingStateRead)
async def next_step(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    try:
        wizard.next_step(profile)
    except wizard.OnboardingError as e:
        raise _conflict(e)
    return to_state(await save_profile(profile, db))

@router.post("/prev", response_model=OnboardingStateRead)
async def prev_step(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    try:
        wizard.prev_step(profile)
    except wizard.OnboardingError as e:
        raise _conflict(e)
    return to_state(await save_profile(profile, db))

@router.post("/complete", response_model=OnboardingCompletion)
async def complete_onboarding(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    """Finish the wizard; pays out the completion bonus once."""
    try:
        wizard.complete(profile)
    except wizard.OnboardingError as e:
        raise _conflict(e)
    profile = await save_profile(profile, db)
    logger.info(f"🎉 Onboarding completed for {profile.id}")
    return OnboardingCompletion(
        state=to_state(profile),
        coins_awarded=wizard.COMPLETION_COINS,
        exp_awarded=wizard.COMPLETION_EXP,
        level=profile.level,
        coins=profile.coins,
        total_exp=profile.total_exp,
    )

@router.post("/skip", response_model=OnboardingStateRead)
async def skip_onboarding(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    try:
        wizard.skip(profile)
    except wizard.OnboardingError as e:
        raise _conflict(e)
    profile = await save_profile(profile, db)
    logger.info(f"Onboarding skipped for {profile.id}")
    return to_state(profile)

# ------------------------------------------------------------
# STEP HELPERS
# ------------------------------------------------------------
@router.post("/goal", response_model=OnboardingStateRead)
async def save_goal(
    goal: OnboardingGoal,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    """Goal step: store the monthly budget and saving goal, then move on."""
    profile.monthly_budget = goal.monthly_budget
    profile.saving_goal = goal.saving_goal
    if wizard.is_active(profile):
        wizard.next_step(profile)
    return to_state(await save_profile(profile, db))

@router.get("/categories", response_model=CategoryStepRead)
async def read_category_step(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    categories = await get_categories_for_user(profile.id, db)
    owned = {(c.name.lower(), c.type) for c in categories}
    recommended = [
        RecommendedCategory(**rec, already_added=(rec["name"].lower(), rec["type"]) in owned)
        for rec in RECOMMENDED_CATEGORIES
    ]
    return CategoryStepRead(
        categories=[CategoryRead.model_validate(c) for c in categories],
        recommended=recommended,
    )

@router.post("/categories/{name}", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def add_recommended_category(
    name: str,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    recommended = get_recommended_category(name)
    if recommended is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Recommended category not found")
    existing = await get_category_by_name_for_user(recommended["name"], profile.id, db)
    if existing is not None and existing.type == recommended["type"]:
        raise HTTPException(status.HTTP_409_CONFLICT, detail="Category already exists")
    return await create_category_for_user(profile.id, CategoryCreate(**recommended), db)

@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_category(
    category_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    category = await get_category_by_id(category_id, profile.id, db)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    if category.is_default:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Default categories cannot be deleted")
    await delete_category(category, db)
    return None

@router.post("/first-transaction", response_model=TransactionCreated, status_code=status.HTTP_201_CREATED)
async def record_first_transaction(
    tx_in: TransactionCreate,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    """First-transaction step: the regular recording path, rewards included."""
    created = await record_transaction(profile, tx_in, db)
    if wizard.is_active(profile):
        wizard.next_step(profile)
        await save_profile(profile, db)
    return created
