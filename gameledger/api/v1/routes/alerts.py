# gameledger/api/v1/routes/alerts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
import logging

from gameledger.schemas.budget_alert import AlertCheckResult, BudgetAlertRead
from gameledger.crud import budget_alert as crud_alert
from gameledger.api import deps
from gameledger.core.database import get_async_session
from gameledger.models.budget_alert import BudgetAlert
from gameledger.models.profile import Profile
from gameledger.utils.budget_alerts import check_budget_alerts

router = APIRouter(prefix="/alerts", tags=["Budget Alerts"])
logger = logging.getLogger(__name__)

def to_alert_read(alert: BudgetAlert) -> BudgetAlertRead:
    data = BudgetAlertRead.model_validate(alert)
    data.category_name = alert.category.name if alert.category is not None else None
    return data

@router.get("", response_model=List[BudgetAlertRead])
async def get_alerts(
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(deps.get_current_profile)
):
    """Unread alerts from the last 7 days, newest first"""
    alerts = await crud_alert.get_recent_unread_alerts(db, profile.id)
    return [to_alert_read(a) for a in alerts]

@router.post("/check", response_model=AlertCheckResult)
async def run_alert_check(
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(deps.get_current_profile)
):
    """Re-evaluate this month's budgets now and return what is new plus what is unread"""
    created = await check_budget_alerts(db, profile)
    unread = await crud_alert.get_recent_unread_alerts(db, profile.id)
    return AlertCheckResult(
        created=[to_alert_read(a) for a in created],
        unread=[to_alert_read(a) for a in unread],
    )

@router.post("/read-all")
async def mark_all_alerts_as_read(
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(deps.get_current_profile)
):
    """Mark all alerts as read for the current user"""
    count = await crud_alert.mark_all_as_read(db, profile.id)
    return {"detail": f"Marked {count} alerts as read"}

@router.post("/{alert_id}/read", response_model=BudgetAlertRead)
async def mark_alert_as_read(
    alert_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(deps.get_current_profile)
):
    alert = await crud_alert.get_alert_by_id(db, alert_id, profile.id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    alert = await crud_alert.mark_as_read(db, alert)
    return to_alert_read(alert)
