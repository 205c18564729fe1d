# gameledger/models/badge.py
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID
from gameledger.core.database import Base
from gameledger.models.profile import utcnow


class Badge(Base):
    __tablename__ = "badges"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    name = Column(String(length=100), unique=True, nullable=False)
    description = Column(String(length=255), nullable=False)
    icon = Column(String(length=50), nullable=False)
    color = Column(String(length=20), nullable=True)
    # transaction_count | streak | level | total_exp
    requirement_type = Column(String(length=30), nullable=False)
    requirement_value = Column(Integer, nullable=False)
    exp_reward = Column(Integer, nullable=False, default=0)
    coin_reward = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<Badge name={self.name} {self.requirement_type}>={self.requirement_value}>"


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),
    )

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_id = Column(GUID, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False)
    earned_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="badges")
    badge = relationship("Badge", lazy="joined")
