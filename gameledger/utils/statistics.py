# gameledger/utils/statistics.py
"""
Aggregations behind the dashboard, budget and trends views.

Everything here is a pure function over already-loaded rows, so the
routes decide which date range to fetch and these helpers only count.
"""
import calendar
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from gameledger.models.category import EntryType
from gameledger.schemas.stats import (
    BudgetProgress,
    CategoryBudgetProgress,
    CategoryBudgetProgressItem,
    CategoryExpense,
    CategoryTrend,
    DailyStats,
    DayOfWeekSpending,
    GrowthRate,
    MonthlySummary,
    MonthlyTrend,
    SpendingPatterns,
    YearlyComparison,
    YearlySummary,
)

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#cccccc"
# Sunday first
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
PATTERN_WINDOW_DAYS = 90


# ────────────────────────────────────────────────────────────────────────────────
# DATE HELPERS
# ────────────────────────────────────────────────────────────────────────────────
def month_range(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)

def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1

def pattern_window(today: date) -> Tuple[date, date]:
    return today - timedelta(days=PATTERN_WINDOW_DAYS), today


def _sum(transactions: Iterable, type: EntryType) -> float:
    return sum(float(t.amount) for t in transactions if t.type == type)

def percent_change(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


# ────────────────────────────────────────────────────────────────────────────────
# DASHBOARD
# ────────────────────────────────────────────────────────────────────────────────
def monthly_summary(current: Sequence, previous: Sequence) -> MonthlySummary:
    """Totals for a month; `previous` is the month before, used for the change."""
    total_income = _sum(current, EntryType.income)
    total_expense = _sum(current, EntryType.expense)
    prev_expense = _sum(previous, EntryType.expense)
    return MonthlySummary(
        total_income=total_income,
        total_expense=total_expense,
        net_amount=total_income - total_expense,
        transaction_count=len(current),
        expense_change=percent_change(total_expense, prev_expense),
    )

def category_expenses(transactions: Sequence) -> List[CategoryExpense]:
    """Expense categories with spending this period, largest first."""
    totals: Dict = defaultdict(float)
    meta: Dict = {}
    for t in transactions:
        if t.type != EntryType.expense or t.category_id is None:
            continue
        totals[t.category_id] += float(t.amount)
        if t.category is not None:
            meta[t.category_id] = (t.category.name, t.category.color)

    grand_total = sum(totals.values())
    result = []
    for category_id, amount in totals.items():
        if amount <= 0:
            continue
        name, color = meta.get(category_id, (UNCATEGORIZED_NAME, UNCATEGORIZED_COLOR))
        result.append(CategoryExpense(
            category_id=category_id,
            name=name,
            color=color,
            amount=amount,
            percentage=amount / grand_total * 100 if grand_total > 0 else 0.0,
        ))
    result.sort(key=lambda c: c.amount, reverse=True)
    return result

def budget_status(usage: float) -> str:
    if usage <= 70:
        return "good"
    if usage <= 90:
        return "caution"
    return "over"

def saving_status(progress: float, current_saving: float) -> str:
    if progress >= 100:
        return "achieved"
    if progress >= 70:
        return "close"
    if current_saving > 0:
        return "saving"
    return "deficit"

def budget_progress(
    monthly_budget: Optional[float],
    saving_goal: Optional[float],
    total_income: float,
    total_expense: float,
) -> BudgetProgress:
    budget = float(monthly_budget or 0)
    goal = float(saving_goal or 0)
    usage = total_expense / budget * 100 if budget > 0 else 0.0
    current_saving = total_income - total_expense
    progress = current_saving / goal * 100 if goal > 0 else 0.0
    return BudgetProgress(
        monthly_budget=budget,
        saving_goal=goal,
        total_income=total_income,
        total_expense=total_expense,
        budget_usage=usage,
        remaining_budget=budget - total_expense,
        current_saving=current_saving,
        saving_progress=progress,
        budget_status=budget_status(usage),
        saving_status=saving_status(progress, current_saving),
    )

def category_budget_progress(budgets: Sequence, transactions: Sequence) -> CategoryBudgetProgress:
    """Spending against each category budget for the loaded month."""
    spent_by_category: Dict = defaultdict(float)
    for t in transactions:
        if t.type == EntryType.expense and t.category_id is not None:
            spent_by_category[t.category_id] += float(t.amount)

    items = []
    for b in budgets:
        amount = float(b.amount)
        spent = spent_by_category.get(b.category_id, 0.0)
        category = b.category
        items.append(CategoryBudgetProgressItem(
            category_id=b.category_id,
            name=category.name if category is not None else UNCATEGORIZED_NAME,
            color=category.color if category is not None else None,
            icon=category.icon if category is not None else None,
            budget=amount,
            spent=spent,
            remaining=amount - spent,
            percentage=spent / amount * 100 if amount > 0 else 0.0,
        ))
    items.sort(key=lambda i: i.percentage, reverse=True)

    total_budget = sum(i.budget for i in items)
    total_spent = sum(i.spent for i in items)
    return CategoryBudgetProgress(
        items=items,
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        total_percentage=total_spent / total_budget * 100 if total_budget > 0 else 0.0,
    )


# ────────────────────────────────────────────────────────────────────────────────
# TRENDS
# ────────────────────────────────────────────────────────────────────────────────
def monthly_trends(transactions: Sequence) -> List[MonthlyTrend]:
    """Twelve months of income, expense and net for the loaded year."""
    income = [0.0] * 12
    expense = [0.0] * 12
    for t in transactions:
        idx = t.date.month - 1
        if t.type == EntryType.income:
            income[idx] += float(t.amount)
        else:
            expense[idx] += float(t.amount)
    return [
        MonthlyTrend(
            month=i + 1,
            month_name=calendar.month_abbr[i + 1],
            income=income[i],
            expense=expense[i],
            net=income[i] - expense[i],
        )
        for i in range(12)
    ]

def category_trends(transactions: Sequence) -> List[CategoryTrend]:
    """Monthly expense per category name for the loaded year, largest total first."""
    trends: Dict[str, CategoryTrend] = {}
    for t in transactions:
        if t.type != EntryType.expense:
            continue
        if t.category is not None:
            name, color = t.category.name, t.category.color or UNCATEGORIZED_COLOR
        else:
            name, color = UNCATEGORIZED_NAME, UNCATEGORIZED_COLOR
        trend = trends.get(name)
        if trend is None:
            trend = trends[name] = CategoryTrend(name=name, color=color, data=[0.0] * 12, total=0.0)
        trend.data[t.date.month - 1] += float(t.amount)
        trend.total += float(t.amount)
    return sorted(trends.values(), key=lambda c: c.total, reverse=True)

def yearly_summary(year: int, transactions: Sequence) -> YearlySummary:
    income = _sum(transactions, EntryType.income)
    expense = _sum(transactions, EntryType.expense)
    return YearlySummary(year=year, income=income, expense=expense, net=income - expense)

def growth_rate(years: Sequence[YearlySummary]) -> GrowthRate:
    """Growth of the last year over the one before it."""
    if len(years) < 2:
        return GrowthRate(income=0.0, expense=0.0)
    current, previous = years[-1], years[-2]
    return GrowthRate(
        income=percent_change(current.income, previous.income),
        expense=percent_change(current.expense, previous.expense),
    )

def yearly_comparison(by_year: Dict[int, Sequence]) -> YearlyComparison:
    years = [yearly_summary(year, by_year[year]) for year in sorted(by_year)]
    return YearlyComparison(years=years, growth_rate=growth_rate(years))

def spending_patterns(transactions: Sequence) -> SpendingPatterns:
    """Day-of-week shares and per-day stats over the loaded expense window."""
    by_weekday = [0.0] * 7
    by_day: Dict[date, float] = defaultdict(float)
    for t in transactions:
        if t.type != EntryType.expense:
            continue
        # date.weekday() is Monday=0; shift so Sunday lands in slot 0
        by_weekday[(t.date.weekday() + 1) % 7] += float(t.amount)
        by_day[t.date] += float(t.amount)

    total = sum(by_weekday)
    day_of_week = [
        DayOfWeekSpending(
            day=DAY_NAMES[i],
            amount=amount,
            percentage=amount / total * 100 if total > 0 else 0.0,
        )
        for i, amount in enumerate(by_weekday)
    ]

    daily_totals = list(by_day.values())
    if daily_totals:
        stats = DailyStats(
            average=sum(daily_totals) / len(daily_totals),
            max=max(daily_totals),
            min=min(daily_totals),
        )
    else:
        stats = DailyStats(average=0.0, max=0.0, min=0.0)
    return SpendingPatterns(day_of_week=day_of_week, daily_stats=stats)
