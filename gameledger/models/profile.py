# gameledger/models/profile.py
from datetime import datetime, timezone
from sqlalchemy import Column, String, ForeignKey, Float, Boolean, Integer, Date, DateTime
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID
from gameledger.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the owning user
    id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    username = Column(String(length=20), unique=True, nullable=True)
    full_name = Column(String(length=50), nullable=True)
    avatar_url = Column(String(length=500), nullable=True)

    # Gamification counters
    level = Column(Integer, nullable=False, default=1)
    total_exp = Column(Integer, nullable=False, default=0)
    coins = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)

    # Budget
    monthly_budget = Column(Float, nullable=True)
    saving_goal = Column(Float, nullable=True)

    # Onboarding wizard: step 0 means the wizard is not running
    onboarding_completed = Column(Boolean, nullable=False, default=False)
    onboarding_skipped = Column(Boolean, nullable=False, default=False)
    onboarding_completed_at = Column(DateTime(timezone=True), nullable=True)
    onboarding_step = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile id={self.id} level={self.level} exp={self.total_exp}>"
