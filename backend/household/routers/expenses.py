"""Expenses: create a split, soft-delete it, page through recent ones."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from household.auth import SessionContext, get_session_context
from household.database import get_db
from household.models import Expense, Transfer
from household.schemas import (
    ExpenseResponse,
    SplitCreate,
    SplitCreated,
    SplitDelete,
    TransactionsListRequest,
    TransactionsListResponse,
    TransferResponse,
)
from household.services.ledger_writer import LedgerWriter

PAGE_SIZE = 5

router = APIRouter(tags=["expenses"])


def get_ledger_writer(db: Session = Depends(get_db)) -> LedgerWriter:
    return LedgerWriter(db)


def _expense_response(exp: Expense) -> ExpenseResponse:
    return ExpenseResponse(
        id=exp.id,
        transaction_id=exp.transaction_id,
        description=exp.description,
        amount=float(exp.amount),
        currency=exp.currency,
        group_id=exp.group_id,
        metadata=exp.details or {},
        created_at=exp.created_at,
    )


def _transfer_response(t: Transfer) -> TransferResponse:
    return TransferResponse(
        transaction_id=t.transaction_id,
        from_member_id=t.from_member_id,
        to_member_id=t.to_member_id,
        amount=float(t.amount),
        currency=t.currency,
    )


@router.post("/split_new", response_model=SplitCreated)
def create_split(
    data: SplitCreate,
    writer: LedgerWriter = Depends(get_ledger_writer),
    context: SessionContext = Depends(get_session_context),
):
    expense = writer.create_expense(context, data)
    return SplitCreated(expense_id=expense.id, transaction_id=expense.transaction_id)


@router.post("/split_delete")
def delete_split(
    data: SplitDelete,
    writer: LedgerWriter = Depends(get_ledger_writer),
    context: SessionContext = Depends(get_session_context),
):
    writer.delete_expense(context, data.id)
    return {"message": "Transaction deleted successfully"}


@router.post("/transactions_list", response_model=TransactionsListResponse)
def list_transactions(
    data: TransactionsListRequest,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    expenses = (
        db.query(Expense)
        .filter(Expense.group_id == context.group.id, Expense.deleted_at.is_(None))
        .order_by(Expense.created_at.desc(), Expense.id.desc())
        .offset(data.offset)
        .limit(PAGE_SIZE)
        .all()
    )
    details: dict[str, list[TransferResponse]] = {e.transaction_id: [] for e in expenses}
    if details:
        transfers = (
            db.query(Transfer)
            .filter(Transfer.transaction_id.in_(list(details)), Transfer.deleted_at.is_(None))
            .order_by(Transfer.id)
            .all()
        )
        for t in transfers:
            details[t.transaction_id].append(_transfer_response(t))

    return TransactionsListResponse(
        transactions=[_expense_response(e) for e in expenses],
        transaction_details=details,
    )
