from __future__ import annotations

import datetime as dt

import pytest

pytestmark = pytest.mark.integration


def _create_account(client, headers, **body):
    payload = {"name": "Checking", "account_type": "CURRENT", "balance": 100}
    payload.update(body)
    return client.post("/api/finance/accounts", json=payload, headers=headers)


def test_first_account_becomes_default(client, auth_headers):
    resp = _create_account(client, auth_headers)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["is_default"] is True
    assert data["balance"] == 100.0


def test_new_default_clears_previous(client, auth_headers):
    first = _create_account(client, auth_headers).get_json()["data"]
    second = _create_account(client, auth_headers, name="Savings", account_type="SAVINGS", is_default=True)
    assert second.status_code == 201

    listed = client.get("/api/finance/accounts", headers=auth_headers).get_json()["data"]
    defaults = {row["name"]: row["is_default"] for row in listed}
    assert defaults == {"Checking": False, "Savings": True}
    assert first["id"] in {row["id"] for row in listed}


def test_duplicate_account_name_is_rejected(client, auth_headers):
    _create_account(client, auth_headers)

    resp = _create_account(client, auth_headers, name="checking")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_invalid_account_payload_names_the_field(client, auth_headers):
    resp = _create_account(client, auth_headers, name="")

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "validation_error"
    assert body["message"].startswith("name: ")


def test_opening_balance_beyond_limit_is_rejected(client, auth_headers):
    resp = _create_account(client, auth_headers, balance="10000000000000")

    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("balance: ")
    assert client.get("/api/finance/accounts", headers=auth_headers).get_json()["data"] == []


def test_account_detail_includes_transactions(client, auth_headers, other_user, headers_for):
    account = _create_account(client, auth_headers).get_json()["data"]
    for day, amount in (("2024-05-01", 10), ("2024-05-03", 20)):
        client.post(
            "/api/finance/transactions",
            json={"account_id": account["id"], "type": "EXPENSE", "amount": amount, "date": day},
            headers=auth_headers,
        )

    detail = client.get(f"/api/finance/accounts/{account['id']}", headers=auth_headers)
    assert detail.status_code == 200
    data = detail.get_json()["data"]
    assert data["balance"] == 70.0
    assert data["transaction_count"] == 2
    assert [t["date"] for t in data["transactions"]] == ["2024-05-03", "2024-05-01"]

    listed = client.get("/api/finance/accounts", headers=auth_headers).get_json()["data"]
    assert listed[0]["transaction_count"] == 2

    foreign = client.get(f"/api/finance/accounts/{account['id']}", headers=headers_for(other_user.id))
    assert foreign.status_code == 404
    assert foreign.get_json()["message"] == "Account not found"


def test_dashboard_summarizes_current_month(client, auth_headers):
    account = _create_account(client, auth_headers, balance=0).get_json()["data"]
    today = dt.date.today().isoformat()
    for body in (
        {"type": "INCOME", "amount": 200, "category": "salary"},
        {"type": "EXPENSE", "amount": 50, "category": "food"},
        {"type": "EXPENSE", "amount": 25, "category": "food"},
    ):
        client.post(
            "/api/finance/transactions",
            json={"account_id": account["id"], "date": today, **body},
            headers=auth_headers,
        )

    resp = client.get("/api/finance/dashboard", headers=auth_headers)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["total_balance"] == 125.0
    assert data["month"]["income"] == 200.0
    assert data["month"]["expense"] == 75.0
    assert data["month"]["expenses_by_category"] == {"food": 75.0}
    assert len(data["recent_transactions"]) == 3


def test_dashboard_requires_caller(client):
    resp = client.get("/api/finance/dashboard")

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthenticated"
