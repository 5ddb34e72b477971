from __future__ import annotations

from decimal import Decimal

import pytest

pytestmark = pytest.mark.integration

from fintrack.domains.finance.models.account_models import Account
from fintrack.extensions import db


def _account(user_id: int, name: str = "Checking", balance: str = "100") -> Account:
    account = Account(user_id=user_id, name=name, balance=Decimal(balance), is_default=True)
    db.session.add(account)
    db.session.commit()
    return account


def test_create_requires_token(client, user):
    account = _account(user.id)

    resp = client.post(
        "/api/finance/transactions",
        json={"account_id": account.id, "type": "EXPENSE", "amount": 30, "date": "2024-03-10"},
    )

    assert resp.status_code == 401
    assert resp.get_json() == {"ok": False, "error": "unauthenticated", "message": "Unauthorized"}
    db.session.refresh(account)
    assert account.balance == Decimal("100")


def test_create_then_update_through_api(client, user, auth_headers):
    account = _account(user.id)

    created = client.post(
        "/api/finance/transactions",
        json={"account_id": account.id, "type": "EXPENSE", "amount": 30, "date": "2024-03-10"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    body = created.get_json()
    assert body["ok"] is True
    assert body["data"]["amount"] == 30.0
    db.session.refresh(account)
    assert account.balance == Decimal("70")

    updated = client.put(
        f"/api/finance/transactions/{body['data']['id']}",
        json={"account_id": account.id, "type": "INCOME", "amount": 50, "date": "2024-03-10"},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.get_json()["data"]["type"] == "INCOME"
    db.session.refresh(account)
    assert account.balance == Decimal("150")


def test_create_with_bad_payload_is_400(client, user, auth_headers):
    account = _account(user.id)

    resp = client.post(
        "/api/finance/transactions",
        json={"account_id": account.id, "type": "EXPENSE", "amount": -5, "date": "2024-03-10"},
        headers=auth_headers,
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_get_and_list_are_scoped_to_owner(client, user, other_user, auth_headers, headers_for):
    account = _account(user.id)
    created = client.post(
        "/api/finance/transactions",
        json={"account_id": account.id, "type": "INCOME", "amount": 15, "date": "2024-04-01", "category": "salary"},
        headers=auth_headers,
    ).get_json()["data"]

    resp = client.get(f"/api/finance/transactions/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["category"] == "salary"

    foreign = client.get(f"/api/finance/transactions/{created['id']}", headers=headers_for(other_user.id))
    assert foreign.status_code == 404
    assert foreign.get_json()["message"] == "Transaction not found"

    anonymous = client.get(f"/api/finance/transactions/{created['id']}")
    assert anonymous.status_code == 401

    listed = client.get("/api/finance/transactions?type=INCOME", headers=auth_headers)
    assert listed.status_code == 200
    assert [row["id"] for row in listed.get_json()["data"]] == [created["id"]]

    empty = client.get("/api/finance/transactions?type=EXPENSE", headers=auth_headers)
    assert empty.get_json()["data"] == []


def test_update_requires_write_role(client, user, headers_for):
    account = _account(user.id)

    resp = client.put(
        "/api/finance/transactions/1",
        json={"account_id": account.id, "type": "INCOME", "amount": 50, "date": "2024-03-10"},
        headers=headers_for(user.id, roles=("user",)),
    )

    assert resp.status_code == 403
