from collections import defaultdict
from decimal import Decimal

from household.services.settlement_calculator import (
    TransferLine,
    compute_transfers,
    member_balances,
)

A, B, C, D = 1, 2, 3, 4


def dec(value):
    return Decimal(str(value))


def test_two_way_split():
    lines = compute_transfers(dec(100), {A: dec(100)}, {A: dec(50), B: dec(50)})
    assert lines == [TransferLine(from_member_id=B, to_member_id=A, amount=Decimal("50"))]


def test_three_way_split():
    lines = compute_transfers(dec(90), {A: dec(90)}, {A: dec(34), B: dec(33), C: dec(33)})
    assert [(t.from_member_id, t.to_member_id, t.amount) for t in lines] == [
        (B, A, Decimal("29.7")),
        (C, A, Decimal("29.7")),
    ]
    assert sum(t.amount for t in lines) == Decimal("59.4")


def test_multiple_payers_spread_debt_proportionally():
    # A is owed 40, B is owed 10, C owes 50.
    lines = compute_transfers(
        dec(100), {A: dec(60), B: dec(40)}, {A: dec(20), B: dec(30), C: dec(50)}
    )
    amounts = {(t.from_member_id, t.to_member_id): t.amount for t in lines}
    assert amounts == {(C, A): Decimal("40"), (C, B): Decimal("10")}


def test_conservation_with_non_terminating_shares():
    amount = dec(10)
    paid = {A: dec(5), B: dec(5)}
    pct = {A: dec(10), B: dec(20), C: dec(30), D: dec(40)}
    owed = member_balances(amount, paid, pct)
    lines = compute_transfers(amount, paid, pct)

    # full debtors x creditors cross product
    assert len(lines) == 4

    by_debtor = defaultdict(Decimal)
    by_creditor = defaultdict(Decimal)
    for t in lines:
        by_debtor[t.from_member_id] += t.amount
        by_creditor[t.to_member_id] += t.amount

    tolerance = Decimal("0.00000002")
    for uid, bal in owed.items():
        if bal < 0:
            assert abs(by_debtor[uid] - abs(bal)) <= tolerance
        elif bal > 0:
            assert abs(by_creditor[uid] - bal) <= tolerance


def test_zero_balance_creditor_gets_zero_amount_line():
    # B paid exactly their share, so B is a creditor with nothing owed.
    lines = compute_transfers(
        dec(100), {A: dec(75), B: dec(25)}, {A: dec(25), B: dec(25), C: dec(50)}
    )
    amounts = {(t.from_member_id, t.to_member_id): t.amount for t in lines}
    assert amounts == {(C, A): Decimal("50"), (C, B): Decimal("0")}


def test_never_emits_self_transfers():
    lines = compute_transfers(
        dec(120), {A: dec(70), B: dec(50)}, {A: dec(25), B: dec(25), C: dec(25), D: dec(25)}
    )
    assert lines
    assert all(t.from_member_id != t.to_member_id for t in lines)


def test_fully_balanced_expense_has_no_transfers():
    lines = compute_transfers(dec(60), {A: dec(30), B: dec(30)}, {A: dec(50), B: dec(50)})
    assert lines == []


def test_member_balances_subtract_fair_share_from_paid():
    balances = member_balances(dec(50), {A: dec(50)}, {A: dec(0), B: dec(100)})
    assert balances == {A: Decimal("50"), B: Decimal("-50")}
