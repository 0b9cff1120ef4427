import pytest

from household.models import Expense, Transfer

from conftest import add_group, login


@pytest.fixture
def members(household):
    return household["alice"], household["bob"]


def new_split(client, headers, members, amount=100.0, description="Dinner", paid=None, pct=None):
    alice, bob = members
    return client.post("/api/split_new", json={
        "amount": amount,
        "description": description,
        "currency": "USD",
        "paid_by_shares": paid or {str(alice): amount},
        "split_pct_shares": pct or {str(alice): 50, str(bob): 50},
    }, headers=headers)


def test_create_split(client, auth_headers, members):
    res = new_split(client, auth_headers, members)
    assert res.status_code == 200
    data = res.json()
    assert data["message"] == "Transaction created successfully"
    assert data["transaction_id"]
    assert data["expense_id"]


def test_create_split_rejects_percentages_not_totalling_100(client, db, auth_headers, members):
    alice, bob = members
    res = new_split(client, auth_headers, members, pct={str(alice): 50, str(bob): 49})
    assert res.status_code == 400
    assert res.json()["detail"] == "Split percentages must add up to 100"
    assert db.query(Expense).count() == 0
    assert db.query(Transfer).count() == 0


def test_create_split_rejects_outsider_payer(client, auth_headers, members):
    alice, _ = members
    res = new_split(client, auth_headers, members, paid={str(alice): 60, "999": 40})
    assert res.status_code == 400
    assert res.json()["detail"] == "Payers must be members of the group"


def test_create_split_rejects_bad_currency(client, auth_headers, members):
    alice, bob = members
    res = client.post("/api/split_new", json={
        "amount": 10, "description": "Taxi", "currency": "JPY",
        "paid_by_shares": {str(alice): 10}, "split_pct_shares": {str(alice): 50, str(bob): 50},
    }, headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid currency"


def test_list_transactions(client, auth_headers, members):
    alice, bob = members
    new_split(client, auth_headers, members, description="Dinner")
    res = client.post("/api/transactions_list", json={"offset": 0}, headers=auth_headers)
    assert res.status_code == 200
    data = res.json()
    assert len(data["transactions"]) == 1
    txn = data["transactions"][0]
    assert txn["description"] == "Dinner"
    assert txn["amount"] == 100.0
    assert txn["metadata"]["split_pct_shares"] == {str(alice): 50.0, str(bob): 50.0}
    details = data["transaction_details"][txn["transaction_id"]]
    assert details == [{
        "transaction_id": txn["transaction_id"],
        "from_member_id": bob,
        "to_member_id": alice,
        "amount": 50.0,
        "currency": "USD",
    }]


def test_list_transactions_pages_by_five(client, auth_headers, members):
    for i in range(7):
        new_split(client, auth_headers, members, amount=10.0 * (i + 1), description=f"Expense {i}")
    first = client.post("/api/transactions_list", json={"offset": 0}, headers=auth_headers).json()
    second = client.post("/api/transactions_list", json={"offset": 5}, headers=auth_headers).json()
    assert [t["description"] for t in first["transactions"]] == [f"Expense {i}" for i in range(6, 1, -1)]
    assert [t["description"] for t in second["transactions"]] == ["Expense 1", "Expense 0"]


def test_delete_split(client, auth_headers, members):
    expense_id = new_split(client, auth_headers, members).json()["expense_id"]
    res = client.post("/api/split_delete", json={"id": expense_id}, headers=auth_headers)
    assert res.status_code == 200

    listed = client.post("/api/transactions_list", json={"offset": 0}, headers=auth_headers).json()
    assert listed["transactions"] == []
    assert listed["transaction_details"] == {}

    res = client.post("/api/split_delete", json={"id": expense_id}, headers=auth_headers)
    assert res.status_code == 404


def test_other_group_cannot_delete(client, db, auth_headers, members):
    expense_id = new_split(client, auth_headers, members).json()["expense_id"]
    add_group(db, "Next door", ["mallory"])
    res = client.post("/api/split_delete", json={"id": expense_id}, headers=login(client, "mallory"))
    assert res.status_code == 403

    listed = client.post("/api/transactions_list", json={"offset": 0}, headers=auth_headers).json()
    assert len(listed["transactions"]) == 1


def test_create_split_rejects_amount_too_large_to_store(client, db, auth_headers, members):
    res = new_split(client, auth_headers, members, amount=1e21)
    assert res.status_code == 400
    assert res.json()["detail"] == "Amount must be below 10000000000 with at most 8 decimal places"
    assert db.query(Expense).count() == 0
