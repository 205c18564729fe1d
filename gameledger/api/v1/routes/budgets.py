# gameledger/api/v1/routes/budgets.py
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from gameledger.core.database import get_async_session
from gameledger.api.deps import get_current_profile
from gameledger.crud.category import get_category_by_id
from gameledger.crud.category_budget import get_category_budgets_for_user, set_category_budget
from gameledger.crud.transaction import get_transactions_between
from gameledger.models.category import EntryType
from gameledger.models.profile import Profile
from gameledger.schemas.profile import BudgetSettingsRead, BudgetSettingsUpdate, CategoryBudgetRead
from gameledger.schemas.stats import BudgetProgress, CategoryBudgetProgress
from gameledger.utils.budget_alerts import check_budget_alerts
from gameledger.utils.statistics import budget_progress, category_budget_progress, month_range

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/budgets", tags=["budgets"])

async def _settings_read(profile: Profile, db: AsyncSession) -> BudgetSettingsRead:
    budgets = await get_category_budgets_for_user(profile.id, db)
    return BudgetSettingsRead(
        monthly_budget=profile.monthly_budget,
        saving_goal=profile.saving_goal,
        category_budgets=[CategoryBudgetRead.model_validate(b) for b in budgets],
    )

@router.get("/settings", response_model=BudgetSettingsRead)
async def read_budget_settings(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    return await _settings_read(profile, db)

@router.put("/settings", response_model=BudgetSettingsRead)
async def update_budget_settings(
    settings_in: BudgetSettingsUpdate,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Save the monthly budget, saving goal and per-category budgets in one go.
    A category budget of 0 removes it.
    """
    fields = settings_in.model_dump(exclude_unset=True, exclude={"category_budgets"})
    for field, value in fields.items():
        setattr(profile, field, value)

    for item in settings_in.category_budgets:
        category = await get_category_by_id(item.category_id, profile.id, db)
        if not category:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
        if category.type != EntryType.expense:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Budgets can only be set on expense categories")
        await set_category_budget(profile.id, item.category_id, item.amount, db)

    try:
        db.add(profile)
        await db.commit()
        await db.refresh(profile)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Saving budget settings failed for {profile.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while saving budget settings"
        )

    await check_budget_alerts(db, profile)
    return await _settings_read(profile, db)

@router.get("/progress", response_model=BudgetProgress)
async def read_budget_progress(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    today = date.today()
    start, end = month_range(today.year, today.month)
    transactions = await get_transactions_between(profile.id, start, end, db)
    total_income = sum(t.amount for t in transactions if t.type == EntryType.income)
    total_expense = sum(t.amount for t in transactions if t.type == EntryType.expense)
    return budget_progress(profile.monthly_budget, profile.saving_goal, total_income, total_expense)

@router.get("/categories/progress", response_model=CategoryBudgetProgress)
async def read_category_budget_progress(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_async_session),
):
    today = date.today()
    start, end = month_range(today.year, today.month)
    budgets = await get_category_budgets_for_user(profile.id, db)
    transactions = await get_transactions_between(profile.id, start, end, db, type=EntryType.expense)
    return category_budget_progress(budgets, transactions)
