from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

class OnboardingStateRead(BaseModel):
    active: bool
    step: int
    step_name: Optional[str] = None
    total_steps: int
    completed: bool
    skipped: bool
    completed_at: Optional[datetime] = None

class OnboardingGoal(BaseModel):
    monthly_budget: float = Field(..., gt=0)
    saving_goal: Optional[float] = Field(None, ge=0)

class OnboardingCompletion(BaseModel):
    state: OnboardingStateRead
    coins_awarded: int
    exp_awarded: int
    level: int
    coins: int
    total_exp: int
