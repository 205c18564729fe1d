# gameledger/utils/budget_alerts.py
import logging
from datetime import date
from typing import Iterable, List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from gameledger.crud.budget_alert import build_alert, get_existing_thresholds
from gameledger.crud.category_budget import get_category_budgets_for_user
from gameledger.crud.transaction import month_bounds, sum_amount_between
from gameledger.models.budget_alert import AlertType, BudgetAlert
from gameledger.models.category import EntryType
from gameledger.models.profile import Profile

logger = logging.getLogger(__name__)

ALERT_THRESHOLDS = (50, 80, 100)


def period_key(day: date) -> str:
    return day.strftime("%Y-%m")

def usage_percentage(spent: float, budget: float) -> float:
    if budget <= 0:
        return 0.0
    return spent / budget * 100

def crossed_thresholds(
    spent: float,
    budget: float,
    already_alerted: Iterable[int] = (),
    thresholds: Iterable[int] = ALERT_THRESHOLDS,
) -> List[int]:
    """Thresholds reached by `spent` that have not been alerted yet, ascending."""
    if budget <= 0:
        return []
    percentage = usage_percentage(spent, budget)
    done: Set[int] = set(already_alerted)
    return [t for t in sorted(thresholds) if percentage >= t and t not in done]


async def _check_one(
    db: AsyncSession,
    profile: Profile,
    alert_type: AlertType,
    spent: float,
    budget: float,
    period: str,
    category_id=None,
) -> List[BudgetAlert]:
    existing = await get_existing_thresholds(db, profile.id, alert_type, period, category_id)
    created = []
    for threshold in crossed_thresholds(spent, budget, existing):
        alert = build_alert(
            profile.id,
            alert_type,
            threshold,
            amount_used=spent,
            budget_amount=budget,
            period=period,
            category_id=category_id,
        )
        db.add(alert)
        created.append(alert)
    return created


async def check_budget_alerts(
    db: AsyncSession,
    profile: Profile,
    today: Optional[date] = None,
) -> List[BudgetAlert]:
    """
    Compare this month's spending against the monthly budget and every
    category budget, and record one alert per newly reached threshold.
    Running it again with unchanged totals creates nothing.
    """
    today = today or date.today()
    period = period_key(today)
    start, end = month_bounds(period)

    created: List[BudgetAlert] = []

    monthly_budget = float(profile.monthly_budget or 0)
    if monthly_budget > 0:
        total_expense = await sum_amount_between(profile.id, start, end, EntryType.expense, db)
        created += await _check_one(db, profile, AlertType.total, total_expense, monthly_budget, period)

    for category_budget in await get_category_budgets_for_user(profile.id, db):
        if category_budget.amount <= 0:
            continue
        spent = await sum_amount_between(
            profile.id, start, end, EntryType.expense, db, category_id=category_budget.category_id
        )
        created += await _check_one(
            db,
            profile,
            AlertType.category,
            spent,
            float(category_budget.amount),
            period,
            category_id=category_budget.category_id,
        )

    if created:
        await db.commit()
        for alert in created:
            await db.refresh(alert)
        logger.info(f"🔔 {len(created)} budget alert(s) created for {profile.id} in {period}")
    return created
