"""Pydantic schemas for request/response."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

CURRENCIES = ["USD", "EUR", "GBP", "INR"]


# ----- Auth -----
class LoginRequest(BaseModel):
    username: str
    password: str


class MemberInfo(BaseModel):
    id: int
    username: str
    first_name: str

    class Config:
        from_attributes = True


class GroupMetadata(BaseModel):
    default_share: dict[int, Decimal] = {}
    default_currency: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    username: str
    user_id: int
    group_id: int
    budgets: list[str] = []
    members: list[MemberInfo] = []
    member_ids: list[int] = []
    metadata: GroupMetadata


# ----- Group -----
class GroupResponse(BaseModel):
    id: int
    name: str
    budgets: list[str] = []
    member_ids: list[int] = []
    members: list[MemberInfo] = []
    metadata: GroupMetadata


class GroupMetadataUpdate(BaseModel):
    name: Optional[str] = None
    budgets: Optional[list[str]] = None
    default_currency: Optional[str] = None
    default_share: Optional[dict[int, Decimal]] = None


# ----- Split -----
class SplitCreate(BaseModel):
    amount: Decimal
    description: str = ""
    currency: str
    # member id -> amount actually paid
    paid_by_shares: dict[int, Decimal]
    # member id -> percentage of the amount owed
    split_pct_shares: dict[int, Decimal]


class SplitCreated(BaseModel):
    message: str = "Transaction created successfully"
    expense_id: int
    transaction_id: str


class SplitDelete(BaseModel):
    id: int


# ----- Transactions -----
class TransferResponse(BaseModel):
    transaction_id: str
    from_member_id: int
    to_member_id: int
    amount: float
    currency: str


class ExpenseResponse(BaseModel):
    id: int
    transaction_id: str
    description: str
    amount: float
    currency: str
    group_id: int
    metadata: dict = {}
    created_at: Optional[datetime] = None


class TransactionsListRequest(BaseModel):
    offset: int = Field(0, ge=0)


class TransactionsListResponse(BaseModel):
    transactions: list[ExpenseResponse]
    transaction_details: dict[str, list[TransferResponse]]


# ----- Budget -----
class BudgetCreate(BaseModel):
    name: str = "house"
    description: str = ""
    # positive for a credit, negative for a debit
    amount: Decimal
    currency: str


class BudgetEntryResponse(BaseModel):
    id: int
    description: str
    added_at: datetime
    price: str
    amount: float
    name: str
    currency: str

    class Config:
        from_attributes = True


class BudgetListRequest(BaseModel):
    name: str = "house"
    offset: int = Field(0, ge=0)


class BudgetDelete(BaseModel):
    id: int


class BudgetNameRequest(BaseModel):
    name: str = "house"


class BudgetAmount(BaseModel):
    currency: str
    amount: float


class MonthlyBudget(BaseModel):
    month: str
    year: int
    amounts: list[BudgetAmount]
