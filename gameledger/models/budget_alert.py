import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, Float, Integer, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID
from gameledger.core.database import Base
from gameledger.models.profile import utcnow


class AlertType(str, enum.Enum):
    total = "total"
    category = "category"


class BudgetAlert(Base):
    __tablename__ = "budget_alerts"
    # Postgres treats NULL category ids as distinct, so total alerts are also
    # guarded by the detector's own lookup
    __table_args__ = (
        UniqueConstraint(
            "user_id", "alert_type", "category_id", "percentage", "period",
            name="uq_budget_alert_threshold_period",
        ),
    )

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    alert_type = Column(Enum(AlertType, name="alert_type"), nullable=False)
    category_id = Column(GUID, ForeignKey("categories.id", ondelete="CASCADE"), nullable=True)
    percentage = Column(Integer, nullable=False)
    amount_used = Column(Float, nullable=False)
    budget_amount = Column(Float, nullable=False)
    period = Column(String(length=7), nullable=False)  # YYYY-MM
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="budget_alerts")
    category = relationship("Category", lazy="joined")

    def __repr__(self):
        return f"<BudgetAlert {self.alert_type} {self.percentage}% period={self.period}>"
