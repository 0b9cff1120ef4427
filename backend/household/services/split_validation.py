"""Guard sequence applied to a split request before any transfer is computed.

Checks run in a fixed order and stop at the first failure; the caller reports
that single message. Nothing here touches storage. Sums are compared with
exact ``Decimal`` equality, so a client that rounds its shares differently
from the amount it submits is rejected.
"""
from decimal import Decimal
from typing import Iterable

from household.errors import ValidationError
from household.schemas import CURRENCIES, SplitCreate
from household.services.settlement_calculator import AMOUNT_QUANTUM

HUNDRED = Decimal(100)
# Amount columns are Numeric(18, 8): at most 10 integer digits.
MAX_AMOUNT = Decimal(10) ** 10


def fits_amount_column(value: Decimal) -> bool:
    """True when ``value`` can be stored in an amount column without loss."""
    if abs(value) >= MAX_AMOUNT:
        return False
    return value == value.quantize(AMOUNT_QUANTUM)


def check_percentages(percentages: dict[int, Decimal], member_ids: Iterable[int]) -> None:
    """Percentages must name exactly the group members, each in [0, 100], totalling 100."""
    if sorted(percentages) != sorted(member_ids):
        raise ValidationError("Split must include every group member")
    if any(pct < 0 or pct > HUNDRED for pct in percentages.values()):
        raise ValidationError("Split percentages must be between 0 and 100")
    if not all(fits_amount_column(pct) for pct in percentages.values()):
        raise ValidationError("Split percentages can have at most 8 decimal places")
    if sum(percentages.values(), Decimal(0)) != HUNDRED:
        raise ValidationError("Split percentages must add up to 100")


def validate_split(data: SplitCreate, member_ids: Iterable[int]) -> None:
    member_ids = set(member_ids)

    if data.currency not in CURRENCIES:
        raise ValidationError("Invalid currency")
    if data.amount <= 0:
        raise ValidationError("Amount must be positive")
    if not fits_amount_column(data.amount):
        raise ValidationError("Amount must be below 10000000000 with at most 8 decimal places")
    if not data.description.strip():
        raise ValidationError("Description is required")

    for member_id, paid in data.paid_by_shares.items():
        if paid < 0:
            raise ValidationError("Paid shares cannot be negative")
        if not fits_amount_column(paid):
            raise ValidationError("Paid shares must be below 10000000000 with at most 8 decimal places")
        if member_id not in member_ids:
            raise ValidationError("Payers must be members of the group")
    if sum(data.paid_by_shares.values(), Decimal(0)) != data.amount:
        raise ValidationError("Paid shares must add up to the amount")

    check_percentages(data.split_pct_shares, member_ids)
