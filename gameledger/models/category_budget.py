# gameledger/models/category_budget.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID
from gameledger.core.database import Base
from gameledger.models.profile import utcnow

MONTHLY_PERIOD = "monthly"


class CategoryBudget(Base):
    __tablename__ = "category_budgets"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", "period", name="uq_category_budget_period"),
    )

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(GUID, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Float, nullable=False)
    period = Column(String(length=20), nullable=False, default=MONTHLY_PERIOD)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    user = relationship("User", back_populates="category_budgets")
    category = relationship("Category", back_populates="budgets", lazy="joined")

    def __repr__(self):
        return f"<CategoryBudget category_id={self.category_id} amount={self.amount} period={self.period}>"
