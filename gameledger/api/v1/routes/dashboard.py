# gameledger/api/v1/routes/dashboard.py
import logging
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gameledger.core.database import get_async_session
from gameledger.api.deps import get_current_profile
from gameledger.api.v1.routes.alerts import to_alert_read
from gameledger.crud.budget_alert import get_recent_unread_alerts
from gameledger.crud.category_budget import get_category_budgets_for_user
from gameledger.crud.transaction import get_recent_transactions, get_transactions_between
from gameledger.models.profile import Profile
from gameledger.schemas.stats import DashboardSummary, MonthlySummary
from gameledger.schemas.transaction import TransactionRead
from gameledger.utils.budget_alerts import check_budget_alerts
from gameledger.utils.gamification import build_game_stats
from gameledger.utils.statistics import (
    budget_progress,
    category_budget_progress,
    category_expenses,
    month_range,
    monthly_summary,
    previous_month,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

async def _monthly_summary(profile: Profile, today: date, db: AsyncSession):
    start, end = month_range(today.year, today.month)
    prev_start, prev_end = month_range(*previous_month(today.year, today.month))
    current = await get_transactions_between(profile.id, start, end, db)
    previous = await get_transactions_between(profile.id, prev_start, prev_end, db)
    return current, monthly_summary(current, previous)

@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    """
    Everything the dashboard shows for the current month:
    - Cards: income, expense, net, change against last month
    - Charts: expense by category
    - Progress: monthly budget, saving goal, category budgets
    - Game stats, recent entries and unread budget alerts
    Budget alerts are re-evaluated on every load.
    """
    today = date.today()
    await check_budget_alerts(db, profile, today=today)

    current, summary = await _monthly_summary(profile, today, db)
    budgets = await get_category_budgets_for_user(profile.id, db)
    recent = await get_recent_transactions(db, profile.id, limit=10)
    alerts = await get_recent_unread_alerts(db, profile.id)

    progress = None
    if profile.monthly_budget or profile.saving_goal:
        progress = budget_progress(
            profile.monthly_budget,
            profile.saving_goal,
            summary.total_income,
            summary.total_expense,
        )

    return DashboardSummary(
        summary=summary,
        category_expenses=category_expenses(current),
        budget_progress=progress,
        category_budget_progress=category_budget_progress(budgets, current),
        game_stats=await build_game_stats(profile, db),
        recent_transactions=[TransactionRead.model_validate(t) for t in recent],
        alerts=[to_alert_read(a) for a in alerts],
    )

@router.get("/monthly", response_model=MonthlySummary)
async def get_monthly_summary(
    db: AsyncSession = Depends(get_async_session),
    profile: Profile = Depends(get_current_profile),
):
    _, summary = await _monthly_summary(profile, date.today(), db)
    return summary
