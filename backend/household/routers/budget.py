"""Budgets: credit or debit a named budget, page through entries, totals and monthly spend."""
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from household.auth import SessionContext, get_session_context
from household.database import get_db
from household.errors import NotFoundError, PersistenceError, ValidationError
from household.models import BudgetEntry
from household.schemas import (
    CURRENCIES,
    BudgetAmount,
    BudgetCreate,
    BudgetDelete,
    BudgetEntryResponse,
    BudgetListRequest,
    BudgetNameRequest,
    MonthlyBudget,
)
from household.services.split_validation import fits_amount_column

PAGE_SIZE = 5
MONTHLY_HISTORY = timedelta(days=2 * 365)
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

logger = logging.getLogger(__name__)

router = APIRouter(tags=["budget"])


def _check_budget_name(context: SessionContext, name: str) -> None:
    if name not in (context.group.budgets or []):
        raise ValidationError("Invalid budget name")


def _live_entries(db: Session, context: SessionContext, name: str):
    return db.query(BudgetEntry).filter(
        BudgetEntry.group_id == context.group.id,
        BudgetEntry.name == name,
        BudgetEntry.deleted_at.is_(None),
    )


def format_price(amount: Decimal) -> str:
    sign = "-" if amount < 0 else "+"
    return f"{sign}{abs(amount):.2f}"


def group_by_month(entries: list[BudgetEntry]) -> list[MonthlyBudget]:
    """Sum debits per (year, month, currency), newest month first."""
    sums: dict[tuple[int, int], dict[str, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
    for entry in entries:
        sums[(entry.added_at.year, entry.added_at.month)][entry.currency] += entry.amount

    return [
        MonthlyBudget(
            month=MONTH_NAMES[month - 1],
            year=year,
            amounts=[
                BudgetAmount(currency=currency, amount=float(total))
                for currency, total in sorted(sums[(year, month)].items())
            ],
        )
        for year, month in sorted(sums, reverse=True)
    ]


@router.post("/budget", response_model=BudgetEntryResponse)
def add_budget_entry(
    data: BudgetCreate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    _check_budget_name(context, data.name)
    if data.currency not in CURRENCIES:
        raise ValidationError("Invalid currency")
    if data.amount == 0:
        raise ValidationError("Amount cannot be zero")
    if not fits_amount_column(data.amount):
        raise ValidationError("Amount must be below 10000000000 with at most 8 decimal places")

    entry = BudgetEntry(
        description=data.description.strip(),
        added_at=datetime.utcnow(),
        price=format_price(data.amount),
        amount=data.amount,
        name=data.name,
        group_id=context.group.id,
        currency=data.currency,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to save budget entry for group %s: %s", context.group.id, e)
        raise PersistenceError("Could not save the budget entry, please retry") from e

    db.refresh(entry)
    logger.info("Added %s %s to budget %r of group %s", entry.price, entry.currency, entry.name, context.group.id)
    return entry


@router.post("/budget_list", response_model=list[BudgetEntryResponse])
def list_budget_entries(
    data: BudgetListRequest,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    _check_budget_name(context, data.name)
    return (
        _live_entries(db, context, data.name)
        .order_by(BudgetEntry.added_at.desc(), BudgetEntry.id.desc())
        .offset(data.offset)
        .limit(PAGE_SIZE)
        .all()
    )


@router.post("/budget_delete")
def delete_budget_entry(
    data: BudgetDelete,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    entry = (
        db.query(BudgetEntry)
        .filter(
            BudgetEntry.id == data.id,
            BudgetEntry.group_id == context.group.id,
            BudgetEntry.deleted_at.is_(None),
        )
        .first()
    )
    if entry is None:
        raise NotFoundError("Budget entry not found")

    try:
        entry.deleted_at = datetime.utcnow()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to delete budget entry %s: %s", data.id, e)
        raise PersistenceError("Could not delete the budget entry, please retry") from e
    return {"message": "Budget entry deleted successfully"}


@router.post("/budget_total", response_model=list[BudgetAmount])
def budget_total(
    data: BudgetNameRequest,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    _check_budget_name(context, data.name)
    rows = (
        db.query(BudgetEntry.currency, func.sum(BudgetEntry.amount))
        .filter(
            BudgetEntry.group_id == context.group.id,
            BudgetEntry.name == data.name,
            BudgetEntry.deleted_at.is_(None),
        )
        .group_by(BudgetEntry.currency)
        .order_by(BudgetEntry.currency)
        .all()
    )
    return [BudgetAmount(currency=currency, amount=round(float(total), 2)) for currency, total in rows]


@router.post("/budget_monthly", response_model=list[MonthlyBudget])
def budget_monthly(
    data: BudgetNameRequest,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    _check_budget_name(context, data.name)
    # Spend only: credits are left out of the monthly view.
    debits = (
        _live_entries(db, context, data.name)
        .filter(
            BudgetEntry.amount < 0,
            BudgetEntry.added_at >= datetime.utcnow() - MONTHLY_HISTORY,
        )
        .all()
    )
    return group_by_month(debits)
