from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
import uuid

from gameledger.models.budget_alert import AlertType

class BudgetAlertRead(BaseModel):
    id: uuid.UUID
    alert_type: AlertType
    category_id: Optional[uuid.UUID] = None
    category_name: Optional[str] = None
    percentage: int
    amount_used: float
    budget_amount: float
    period: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True

class AlertCheckResult(BaseModel):
    created: List[BudgetAlertRead]
    unread: List[BudgetAlertRead]
