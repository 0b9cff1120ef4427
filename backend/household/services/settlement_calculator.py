"""Work out who owes whom for a single expense."""
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

HUNDRED = Decimal(100)
# Scale of the amount columns.
AMOUNT_QUANTUM = Decimal("0.00000001")


@dataclass(frozen=True)
class TransferLine:
    from_member_id: int
    to_member_id: int
    amount: Decimal


def member_balances(
    amount: Decimal,
    paid_shares: dict[int, Decimal],
    owed_percentages: dict[int, Decimal],
) -> dict[int, Decimal]:
    """member id -> paid minus fair share (positive = is owed money, negative = owes money)."""
    return {
        member_id: paid_shares.get(member_id, Decimal(0)) - amount * pct / HUNDRED
        for member_id, pct in owed_percentages.items()
    }


def compute_transfers(
    amount: Decimal,
    paid_shares: dict[int, Decimal],
    owed_percentages: dict[int, Decimal],
) -> list[TransferLine]:
    """
    Spread every debtor's deficit over all creditors in proportion to each
    creditor's share of the total credit.

    This is a full debtors x creditors cross product, not a minimal matching.
    A creditor whose balance is exactly zero still gets a zero-amount line
    from every debtor. Summed per debtor the lines give that debtor's deficit,
    summed per creditor they give that creditor's surplus.
    """
    owed = member_balances(amount, paid_shares, owed_percentages)
    creditors = [uid for uid in sorted(owed) if owed[uid] >= 0]
    debtors = [uid for uid in sorted(owed) if owed[uid] < 0]

    total_credit = sum((owed[uid] for uid in creditors), Decimal(0))
    if total_credit == 0:
        return []

    out: list[TransferLine] = []
    for debtor in debtors:
        for creditor in creditors:
            share = abs(owed[creditor] * owed[debtor] / total_credit)
            out.append(
                TransferLine(
                    from_member_id=debtor,
                    to_member_id=creditor,
                    amount=share.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_EVEN),
                )
            )
    return out
