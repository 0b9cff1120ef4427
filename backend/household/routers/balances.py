"""Balances: what everyone else owes the caller, per currency."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from household.auth import SessionContext, get_session_context
from household.database import get_db
from household.services.balance_aggregator import compute_balances

router = APIRouter(tags=["balances"])


@router.post("/balances", response_model=dict[str, dict[str, float]])
def get_balances(
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    balances = compute_balances(db, context)
    return {
        name: {currency: round(float(amount), 2) for currency, amount in per_currency.items()}
        for name, per_currency in balances.items()
    }
