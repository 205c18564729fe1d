# gameledger/crud/budget_alert.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc
from gameledger.models.budget_alert import AlertType, BudgetAlert
from typing import List, Optional, Set
import uuid
from datetime import datetime, timedelta, timezone

RECENT_ALERT_DAYS = 7

async def get_existing_thresholds(
    db: AsyncSession,
    user_id: uuid.UUID,
    alert_type: AlertType,
    period: str,
    category_id: Optional[uuid.UUID] = None,
) -> Set[int]:
    """Thresholds already alerted for this (user, type, category, period)"""
    query = select(BudgetAlert.percentage).where(
        BudgetAlert.user_id == user_id,
        BudgetAlert.alert_type == alert_type,
        BudgetAlert.period == period,
    )
    if category_id is None:
        query = query.where(BudgetAlert.category_id.is_(None))
    else:
        query = query.where(BudgetAlert.category_id == category_id)
    result = await db.execute(query)
    return set(result.scalars().all())

def build_alert(
    user_id: uuid.UUID,
    alert_type: AlertType,
    percentage: int,
    amount_used: float,
    budget_amount: float,
    period: str,
    category_id: Optional[uuid.UUID] = None,
) -> BudgetAlert:
    return BudgetAlert(
        user_id=user_id,
        alert_type=alert_type,
        category_id=category_id,
        percentage=percentage,
        amount_used=amount_used,
        budget_amount=budget_amount,
        period=period,
        is_read=False,
    )

async def get_recent_unread_alerts(
    db: AsyncSession,
    user_id: uuid.UUID,
    days: int = RECENT_ALERT_DAYS,
) -> List[BudgetAlert]:
    """Unread alerts from the last `days` days, newest first"""
    since = datetime.now(timezone.utc) - timedelta(days=days)
    result = await db.execute(
        select(BudgetAlert)
        .filter(
            BudgetAlert.user_id == user_id,
            BudgetAlert.is_read == False,
            BudgetAlert.created_at >= since,
        )
        .order_by(desc(BudgetAlert.created_at))
    )
    return result.scalars().all()

async def get_alert_by_id(db: AsyncSession, alert_id: uuid.UUID, user_id: uuid.UUID) -> Optional[BudgetAlert]:
    result = await db.execute(
        select(BudgetAlert).filter(BudgetAlert.id == alert_id, BudgetAlert.user_id == user_id)
    )
    return result.scalars().first()

async def mark_as_read(db: AsyncSession, alert: BudgetAlert) -> BudgetAlert:
    alert.is_read = True
    db.add(alert)
    await db.commit()
    await db.refresh(alert)
    return alert

async def mark_all_as_read(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Mark all unread alerts of a user as read; returns how many changed"""
    result = await db.execute(
        update(BudgetAlert)
        .where(BudgetAlert.user_id == user_id, BudgetAlert.is_read == False)
        .values(is_read=True)
    )
    await db.commit()
    return result.rowcount
