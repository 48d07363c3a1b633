import enum
import uuid
from sqlalchemy import Column, String, DateTime, DECIMAL, Enum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.database import Base, utcnow


class SplitType(str, enum.Enum):
    equal = "equal"
    exact = "exact"


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    group_id = Column(String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    paid_by = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(DECIMAL(18, 2), nullable=False)
    description = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    split_type = Column(Enum(SplitType), nullable=False, default=SplitType.equal)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    payer = relationship("User", lazy="joined")
    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        order_by="ExpenseSplit.position",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    expense_id = Column(String, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(DECIMAL(18, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # Keeps the order splits were given in

    expense = relationship("Expense", back_populates="splits")
