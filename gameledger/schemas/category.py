# gameledger/schemas/category.py
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field
import uuid

from gameledger.models.category import EntryType

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None
    icon: Optional[str] = None
    type: EntryType

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    icon: Optional[str] = None

class CategoryRead(CategoryBase):
    id: uuid.UUID
    is_default: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Suggested during the onboarding category step
class RecommendedCategory(BaseModel):
    name: str
    color: str
    icon: str
    type: EntryType
    already_added: bool = False
