from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

from fintrack.core.auth.auth_service import hash_password
from fintrack.core.users.models import User
from fintrack.extensions import db


def test_register_grants_finance_role_and_allows_writes(client):
    resp = client.post(
        "/auth/register",
        json={"email": "New@Fintrack.io", "password": "Secret123!", "full_name": "New User"},
    )
    assert resp.status_code == 201, resp.get_json()
    assert resp.get_json()["user"]["email"] == "new@fintrack.io"

    login = client.post("/auth/login", json={"email": "new@fintrack.io", "password": "Secret123!"})
    assert login.status_code == 200
    body = login.get_json()
    assert "finance:write" in body["user"]["role_codes"]

    headers = {"Authorization": f"Bearer {body['access_token']}", "X-CSRF-Token": body["csrf_token"]}
    created = client.post("/api/finance/accounts", json={"name": "Wallet"}, headers=headers)
    assert created.status_code == 201


def test_duplicate_registration_is_rejected(client):
    payload = {"email": "dup@fintrack.io", "password": "Secret123!"}
    assert client.post("/auth/register", json=payload).status_code == 201

    again = client.post("/auth/register", json=payload)

    assert again.status_code == 400
    assert again.get_json()["error"] == "email_already_exists"


def test_login_rejects_bad_password(app, client):
    with app.app_context():
        db.session.add(User(email="login@example.com", password_hash=hash_password("demo12345")))
        db.session.commit()

    resp = client.post("/auth/login", json={"email": "login@example.com", "password": "wrong-pass"})

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "invalid_credentials"


def test_logout_revokes_refresh_token(app, client):
    with app.app_context():
        db.session.add(User(email="bye@example.com", password_hash=hash_password("demo12345")))
        db.session.commit()

    body = client.post("/auth/login", json={"email": "bye@example.com", "password": "demo12345"}).get_json()
    refresh_headers = {"Authorization": f"Bearer {body['refresh_token']}", "X-CSRF-Token": body["csrf_token"]}

    assert client.post("/auth/logout", headers=refresh_headers).status_code == 200
    assert client.post("/auth/refresh", headers=refresh_headers).status_code == 401
