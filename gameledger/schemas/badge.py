# gameledger/schemas/badge.py
from typing import Optional
from datetime import datetime
from pydantic import BaseModel
import uuid

class BadgeRead(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    icon: str
    color: Optional[str] = None
    requirement_type: str
    requirement_value: int
    exp_reward: int
    coin_reward: int

    class Config:
        from_attributes = True

class UserBadgeRead(BaseModel):
    badge: BadgeRead
    earned_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Catalog entry with the caller's ownership flag
class BadgeProgress(BadgeRead):
    earned: bool = False
    earned_at: Optional[datetime] = None
