"""Net balances between the acting member and everyone else in the group, per currency."""
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from household.auth import SessionContext
from household.models import Transfer


@dataclass(frozen=True)
class PairTotal:
    from_member_id: int
    to_member_id: int
    currency: str
    amount: Decimal


def fetch_pair_totals(db: Session, group_id: int) -> list[PairTotal]:
    """Gross totals of live transfers, grouped by (from, to, currency)."""
    rows = (
        db.query(
            Transfer.from_member_id,
            Transfer.to_member_id,
            Transfer.currency,
            func.sum(Transfer.amount).label("amount"),
        )
        .filter(Transfer.group_id == group_id, Transfer.deleted_at.is_(None))
        .group_by(Transfer.from_member_id, Transfer.to_member_id, Transfer.currency)
        .order_by(Transfer.from_member_id, Transfer.to_member_id, Transfer.currency)
        .all()
    )
    return [
        PairTotal(r.from_member_id, r.to_member_id, r.currency, Decimal(r.amount))
        for r in rows
    ]


def net_balances(
    pair_totals: list[PairTotal],
    user_id: int,
    member_names: dict[int, str],
) -> dict[str, dict[str, Decimal]]:
    """
    Collapse pair totals into {counterpart name: {currency: net}} for ``user_id``.

    Positive net means the counterpart owes the user; negative means the user
    owes the counterpart. Self pairs are skipped. Zero nets are kept.
    """
    balances: dict[str, dict[str, Decimal]] = {}
    for row in pair_totals:
        if row.from_member_id == row.to_member_id:
            continue
        if row.to_member_id == user_id:
            other, signed = row.from_member_id, row.amount
        elif row.from_member_id == user_id:
            other, signed = row.to_member_id, -row.amount
        else:
            continue
        per_currency = balances.setdefault(member_names.get(other, str(other)), {})
        per_currency[row.currency] = per_currency.get(row.currency, Decimal(0)) + signed
    return balances


def compute_balances(db: Session, context: SessionContext) -> dict[str, dict[str, Decimal]]:
    return net_balances(fetch_pair_totals(db, context.group.id), context.user.id, context.members)
