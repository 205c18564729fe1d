# gameledger/schemas/transaction.py
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from datetime import date as date_type, datetime
import uuid

from gameledger.models.category import EntryType
from gameledger.schemas.badge import BadgeRead

class TransactionBase(BaseModel):
    amount: float = Field(..., gt=0, description="Positive amount; the type decides the sign")
    type: EntryType
    date: date_type
    description: Optional[str] = Field(None, max_length=255, description="E.g. Lunch with team")
    category_id: Optional[uuid.UUID] = None

class TransactionCreate(TransactionBase):
    pass

class TransactionUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    type: Optional[EntryType] = None
    date: Optional[date_type] = None
    description: Optional[str] = Field(None, max_length=255)
    category_id: Optional[uuid.UUID] = None

    # Optional means "leave unchanged"; these columns cannot be cleared
    @field_validator("amount", "type", "date")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

class TransactionCategory(BaseModel):
    id: uuid.UUID
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None

    class Config:
        from_attributes = True

class TransactionRead(TransactionBase):
    id: uuid.UUID
    exp_gained: int
    created_at: Optional[datetime] = None
    category: Optional[TransactionCategory] = None

    class Config:
        from_attributes = True

class TransactionPage(BaseModel):
    items: List[TransactionRead]
    total: int
    page: int
    per_page: int
    pages: int

# What the player earned for recording an entry
class RewardResult(BaseModel):
    exp_gained: int
    coins_gained: int
    total_exp: int
    coins: int
    level: int
    leveled_up: bool
    current_streak: int
    longest_streak: int
    new_badges: List[BadgeRead] = []

class TransactionCreated(BaseModel):
    transaction: TransactionRead
    reward: RewardResult
