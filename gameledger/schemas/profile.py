# gameledger/schemas/profile.py
import re
from typing import List, Optional
from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
import uuid

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

# Public fields returned on GET /profile/me
class ProfileRead(BaseModel):
    id: uuid.UUID
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    level: int
    total_exp: int
    coins: int
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date] = None
    monthly_budget: Optional[float] = None
    saving_goal: Optional[float] = None
    onboarding_completed: bool
    onboarding_skipped: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Fields accepted on PATCH /profile/me
class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=20)
    full_name: Optional[str] = Field(None, min_length=2, max_length=50)

    @field_validator("username")
    @classmethod
    def username_charset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not USERNAME_PATTERN.match(value):
            raise ValueError("Username may only contain letters, numbers and underscores")
        return value

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Full name must be at least 2 characters")
        return value

class GameStats(BaseModel):
    level: int
    total_exp: int
    exp_into_level: int
    exp_to_next_level: int
    level_progress: float
    coins: int
    current_streak: int
    longest_streak: int
    streak_tier: str
    transaction_count: int
    badges_earned: int

class CategoryBudgetInput(BaseModel):
    category_id: uuid.UUID
    # 0 removes the category budget
    amount: float = Field(..., ge=0)

class BudgetSettingsUpdate(BaseModel):
    monthly_budget: Optional[float] = Field(None, ge=0)
    saving_goal: Optional[float] = Field(None, ge=0)
    category_budgets: List[CategoryBudgetInput] = []

class CategoryBudgetRead(BaseModel):
    id: uuid.UUID
    category_id: uuid.UUID
    amount: float
    period: str

    class Config:
        from_attributes = True

class BudgetSettingsRead(BaseModel):
    monthly_budget: Optional[float] = None
    saving_goal: Optional[float] = None
    category_budgets: List[CategoryBudgetRead] = []
