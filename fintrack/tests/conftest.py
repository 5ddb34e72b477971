import sys
from pathlib import Path

import pytest
from flask_jwt_extended import create_access_token

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fintrack import create_app
from fintrack.extensions import db
from fintrack.core.auth import models as auth_models  # noqa: F401
from fintrack.core.auth.auth_service import hash_password
from fintrack.core.users.models import User
from fintrack.domains.finance.models import account_models, transaction_models  # noqa: F401
from fintrack.platform.outbox import models as outbox_models  # noqa: F401


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


@pytest.fixture()
def app():
    """Per-test app on a fresh in-memory database."""
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def user(app):
    with app.app_context():
        u = User(email="owner@example.com", password_hash=hash_password("secret123"), full_name="Owner")
        db.session.add(u)
        db.session.commit()
        return u


@pytest.fixture()
def other_user(app):
    with app.app_context():
        u = User(email="other@example.com", password_hash=hash_password("secret123"), full_name="Other")
        db.session.add(u)
        db.session.commit()
        return u


def token_headers(user_id: int, roles=("finance:write",)) -> dict[str, str]:
    token = create_access_token(identity=str(user_id), additional_claims={"roles": list(roles)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers(app, user):
    with app.app_context():
        return token_headers(user.id)


@pytest.fixture()
def headers_for(app):
    return token_headers
