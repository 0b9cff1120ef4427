"""Persist expenses and their transfers, and soft-delete them, one unit of work at a time."""
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from household.auth import SessionContext, generate_id
from household.errors import AuthorizationError, NotFoundError, PersistenceError
from household.models import Expense, Transfer
from household.schemas import SplitCreate
from household.services.settlement_calculator import TransferLine, compute_transfers
from household.services.split_validation import validate_split

logger = logging.getLogger(__name__)


class LedgerWriter:
    """
    Writes an expense header and its transfers together.

    Either every row of a call is committed or none is: on any storage error
    the session is rolled back and ``PersistenceError`` is raised. The writer
    never retries.
    """

    def __init__(self, db: Session, id_generator: Callable[[], str] = generate_id):
        self.db = db
        self.id_generator = id_generator

    def create_expense(self, context: SessionContext, data: SplitCreate) -> Expense:
        validate_split(data, context.member_ids)
        lines = compute_transfers(data.amount, data.paid_by_shares, data.split_pct_shares)
        transaction_id = self.id_generator()

        try:
            expense = self._write_header(context, data, transaction_id)
            self._write_transfers(context, data.currency, transaction_id, lines)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to save expense %s: %s", transaction_id, e)
            raise PersistenceError("Could not save the expense, please retry") from e

        self.db.refresh(expense)
        logger.info(
            "Created expense %s (%s %s) with %d transfers for group %s",
            transaction_id, expense.amount, expense.currency, len(lines), context.group.id,
        )
        return expense

    def delete_expense(self, context: SessionContext, expense_id: int) -> Expense:
        try:
            expense = (
                self.db.query(Expense)
                .filter(Expense.id == expense_id, Expense.deleted_at.is_(None))
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("Could not load the expense, please retry") from e
        if expense is None:
            raise NotFoundError("Expense not found")
        if expense.group_id != context.group.id:
            logger.warning(
                "User %s tried to delete expense %s of another group",
                context.user.id, expense_id,
            )
            raise AuthorizationError("Expense belongs to another group", status_code=403)

        transaction_id = expense.transaction_id
        deleted_at = datetime.utcnow()
        try:
            expense.deleted_at = deleted_at
            self.db.flush()
            self.db.query(Transfer).filter(
                Transfer.transaction_id == transaction_id,
                Transfer.deleted_at.is_(None),
            ).update({Transfer.deleted_at: deleted_at}, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to delete expense %s: %s", transaction_id, e)
            raise PersistenceError("Could not delete the expense, please retry") from e

        logger.info("Deleted expense %s for group %s", transaction_id, context.group.id)
        return expense

    def _write_header(self, context: SessionContext, data: SplitCreate, transaction_id: str) -> Expense:
        expense = Expense(
            transaction_id=transaction_id,
            description=data.description.strip(),
            amount=data.amount,
            currency=data.currency,
            details={
                "paid_by_shares": {str(k): float(v) for k, v in data.paid_by_shares.items()},
                "split_pct_shares": {str(k): float(v) for k, v in data.split_pct_shares.items()},
            },
            group_id=context.group.id,
            created_at=datetime.utcnow(),
        )
        self.db.add(expense)
        self.db.flush()
        return expense

    def _write_transfers(
        self,
        context: SessionContext,
        currency: str,
        transaction_id: str,
        lines: list[TransferLine],
    ) -> None:
        self.db.add_all(
            Transfer(
                transaction_id=transaction_id,
                from_member_id=line.from_member_id,
                to_member_id=line.to_member_id,
                amount=line.amount,
                currency=currency,
                group_id=context.group.id,
            )
            for line in lines
        )
        self.db.flush()
