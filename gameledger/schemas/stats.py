# gameledger/schemas/stats.py
from typing import List, Optional
from pydantic import BaseModel
import uuid

from gameledger.schemas.budget_alert import BudgetAlertRead
from gameledger.schemas.profile import GameStats
from gameledger.schemas.transaction import TransactionRead

class MonthlySummary(BaseModel):
    total_income: float
    total_expense: float
    net_amount: float
    transaction_count: int
    # Percent change of expense against the previous month
    expense_change: float

class CategoryExpense(BaseModel):
    category_id: uuid.UUID
    name: str
    color: Optional[str] = None
    amount: float
    percentage: float

class BudgetProgress(BaseModel):
    monthly_budget: float
    saving_goal: float
    total_income: float
    total_expense: float
    budget_usage: float
    remaining_budget: float
    current_saving: float
    saving_progress: float
    budget_status: str
    saving_status: str

class CategoryBudgetProgressItem(BaseModel):
    category_id: uuid.UUID
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None
    budget: float
    spent: float
    remaining: float
    percentage: float

class CategoryBudgetProgress(BaseModel):
    items: List[CategoryBudgetProgressItem]
    total_budget: float
    total_spent: float
    total_remaining: float
    total_percentage: float

class MonthlyTrend(BaseModel):
    month: int
    month_name: str
    income: float
    expense: float
    net: float

class CategoryTrend(BaseModel):
    name: str
    color: str
    data: List[float]
    total: float

class YearlySummary(BaseModel):
    year: int
    income: float
    expense: float
    net: float

class GrowthRate(BaseModel):
    income: float
    expense: float

class YearlyComparison(BaseModel):
    years: List[YearlySummary]
    growth_rate: GrowthRate

class DayOfWeekSpending(BaseModel):
    day: str
    amount: float
    percentage: float

class DailyStats(BaseModel):
    average: float
    max: float
    min: float

class SpendingPatterns(BaseModel):
    day_of_week: List[DayOfWeekSpending]
    daily_stats: DailyStats

class TrendData(BaseModel):
    year: int
    monthly: List[MonthlyTrend]
    categories: List[CategoryTrend]
    yearly_comparison: YearlyComparison
    patterns: SpendingPatterns

class DashboardSummary(BaseModel):
    summary: MonthlySummary
    category_expenses: List[CategoryExpense]
    budget_progress: Optional[BudgetProgress] = None
    category_budget_progress: CategoryBudgetProgress
    game_stats: GameStats
    recent_transactions: List[TransactionRead]
    alerts: List[BudgetAlertRead]
