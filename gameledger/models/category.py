# gameledger/models/category.py
import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID
from gameledger.core.database import Base
from gameledger.models.profile import utcnow


class EntryType(str, enum.Enum):
    income = "income"
    expense = "expense"


class Category(Base):
    __tablename__ = "categories"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    color = Column(String(length=20), nullable=True)
    icon = Column(String(length=50), nullable=True)
    type = Column(Enum(EntryType, name="entry_type"), nullable=False)
    # Built-in categories cannot be deleted
    is_default = Column(Boolean(), nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="categories")
    transactions = relationship("Transaction", back_populates="category", passive_deletes=True)
    budgets = relationship("CategoryBudget", back_populates="category", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Category name={self.name} type={self.type} user_id={self.user_id}>"
