# gameledger/models/transaction.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime, Integer, Enum
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID
from gameledger.core.database import Base
from gameledger.models.category import EntryType
from gameledger.models.profile import utcnow


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    type = Column(Enum(EntryType, name="entry_type"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(String(length=255), nullable=True)
    category_id = Column(GUID, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    exp_gained = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    user = relationship("User", back_populates="transactions")
    category = relationship("Category", back_populates="transactions", lazy="joined")

    def __repr__(self):
        return f"<Transaction {self.type} amount={self.amount} date={self.date} user_id={self.user_id}>"
