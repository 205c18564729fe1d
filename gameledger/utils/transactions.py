# gameledger/utils/transactions.py
import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from gameledger.crud.category import get_category_by_id
from gameledger.crud.transaction import create_transaction_for_user
from gameledger.models.profile import Profile
from gameledger.schemas.badge import BadgeRead
from gameledger.schemas.transaction import RewardResult, TransactionCreate, TransactionCreated, TransactionRead
from gameledger.utils.budget_alerts import check_budget_alerts
from gameledger.utils.gamification import apply_transaction_rewards, calculate_exp

logger = logging.getLogger(__name__)


async def ensure_category_matches(profile_id, category_id, entry_type, db: AsyncSession) -> None:
    """The category must belong to the user and share the entry's type."""
    if category_id is None:
        return
    category = await get_category_by_id(category_id, profile_id, db)
    if not category:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Category not found")
    if category.type != entry_type:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            detail=f"Category '{category.name}' is for {category.type.value} entries",
        )


async def record_transaction(
    profile: Profile,
    tx_in: TransactionCreate,
    db: AsyncSession,
    today: Optional[date] = None,
) -> TransactionCreated:
    """
    Store a transaction and pay out its rewards in one commit:
    - exp from the amount, flat coins
    - streak update keyed on the recording day
    - any badges that became reachable
    Budget alerts are re-checked afterwards.
    """
    await ensure_category_matches(profile.id, tx_in.category_id, tx_in.type, db)

    exp_gained = calculate_exp(tx_in.amount)
    tx = await create_transaction_for_user(profile.id, tx_in, exp_gained, db, commit=False)
    outcome = await apply_transaction_rewards(profile, exp_gained, db, today=today)
    await db.commit()
    await db.refresh(tx)

    logger.info(
        f"💰 {tx_in.type.value} of {tx_in.amount} recorded for {profile.id}: "
        f"+{exp_gained} exp, level {profile.level}, streak {profile.current_streak}"
    )

    await check_budget_alerts(db, profile, today=today)

    reward = RewardResult(
        exp_gained=outcome.exp_gained,
        coins_gained=outcome.coins_gained,
        total_exp=profile.total_exp,
        coins=profile.coins,
        level=profile.level,
        leveled_up=outcome.leveled_up,
        current_streak=profile.current_streak,
        longest_streak=profile.longest_streak,
        new_badges=[BadgeRead.model_validate(b) for b in outcome.new_badges],
    )
    return TransactionCreated(transaction=TransactionRead.model_validate(tx), reward=reward)
