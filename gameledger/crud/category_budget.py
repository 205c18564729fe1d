# gameledger/crud/category_budget.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from gameledger.models.category_budget import CategoryBudget, MONTHLY_PERIOD
from typing import List, Optional
import uuid

async def get_category_budgets_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    period: str = MONTHLY_PERIOD,
) -> List[CategoryBudget]:
    result = await db.execute(
        select(CategoryBudget).where(
            CategoryBudget.user_id == user_id,
            CategoryBudget.period == period,
        )
    )
    return result.scalars().all()

async def get_category_budget(
    user_id: uuid.UUID,
    category_id: uuid.UUID,
    db: AsyncSession,
    period: str = MONTHLY_PERIOD,
) -> Optional[CategoryBudget]:
    result = await db.execute(
        select(CategoryBudget).where(
            CategoryBudget.user_id == user_id,
            CategoryBudget.category_id == category_id,
            CategoryBudget.period == period,
        )
    )
    return result.scalar_one_or_none()

async def set_category_budget(
    user_id: uuid.UUID,
    category_id: uuid.UUID,
    amount: float,
    db: AsyncSession,
    period: str = MONTHLY_PERIOD,
) -> Optional[CategoryBudget]:
    """Upsert the budget for one category; an amount of 0 deletes it.

    Does not commit so several budgets can be saved in one call.
    """
    existing = await get_category_budget(user_id, category_id, db, period)
    if amount <= 0:
        if existing is not None:
            await db.delete(existing)
        return None
    if existing is None:
        existing = CategoryBudget(
            user_id=user_id,
            category_id=category_id,
            amount=amount,
            period=period,
        )
        db.add(existing)
    else:
        existing.amount = amount
    return existing
