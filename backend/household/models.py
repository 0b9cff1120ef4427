"""SQLAlchemy models."""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from household.database import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, default="")
    # Allowed category (budget) names.
    budgets = Column(JSON, nullable=False, default=list)
    # {"default_share": {member_id: pct}, "default_currency": "USD"}
    group_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("User", back_populates="group", order_by="User.id")

    @property
    def member_ids(self) -> list[int]:
        return [m.id for m in self.members]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="members")


class Session(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User")


class Expense(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(64), unique=True, index=True, nullable=False)
    description = Column(String(512), nullable=False)
    amount = Column(Numeric(18, 8), nullable=False)
    currency = Column(String(3), nullable=False)
    # Submitted paid shares and split percentages, kept for display.
    details = Column("metadata", JSON, nullable=False, default=dict)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
    deleted_at = Column(DateTime, nullable=True)


class Transfer(Base):
    """One "who owes whom" line derived from an expense."""

    __tablename__ = "transaction_users"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(
        String(64), ForeignKey("transactions.transaction_id"), nullable=False, index=True
    )
    from_member_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    to_member_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Numeric(18, 8), nullable=False)
    currency = Column(String(3), nullable=False)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True)


class BudgetEntry(Base):
    """A credit (positive amount) or debit (negative amount) against one of the group's budgets."""

    __tablename__ = "budget"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String(512), nullable=False, default="")
    added_at = Column(DateTime, nullable=False, index=True)
    # Signed display form of the amount, e.g. "+12.00" or "-5.50".
    price = Column(String(32), nullable=False)
    amount = Column(Numeric(18, 8), nullable=False)
    name = Column(String(255), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    currency = Column(String(3), nullable=False)
    deleted_at = Column(DateTime, nullable=True)
