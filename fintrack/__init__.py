"""fintrack application factory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify

from fintrack.config import config_by_name
from fintrack.core.events.event_bus import event_bus
from fintrack.extensions import init_extensions

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _absolute_sqlite_uri(uri: str) -> str:
    """Anchor relative sqlite file paths at the project root; leave other URIs alone."""
    prefix = "sqlite:///"
    if not uri.startswith(prefix) or uri == prefix:
        return uri
    db_path = Path(uri[len(prefix):])
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"{prefix}{db_path}"


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the fintrack Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    app = Flask(__name__, instance_path=str(PROJECT_ROOT / "instance"), instance_relative_config=True)
    app.config.from_object(config_by_name.get(env_name, config_by_name["development"]))
    app.config["SQLALCHEMY_DATABASE_URI"] = _absolute_sqlite_uri(app.config["SQLALCHEMY_DATABASE_URI"])

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    app.extensions["event_bus"] = event_bus
    from fintrack.domains.finance import views

    views.register_subscriptions(event_bus)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    from fintrack.scripts.finance_commands import register_commands

    register_commands(app)
    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from fintrack.core.auth.controllers import auth_bp  # local import to avoid circulars
    from fintrack.domains.finance.controllers.account_api import account_api_bp
    from fintrack.domains.finance.controllers.dashboard_api import dashboard_api_bp
    from fintrack.domains.finance.controllers.receipt_api import receipt_api_bp
    from fintrack.domains.finance.controllers.transaction_api import transaction_api_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    for bp in (account_api_bp, transaction_api_bp, receipt_api_bp, dashboard_api_bp):
        app.register_blueprint(bp, url_prefix="/api/finance")


def _register_error_handlers(app: Flask) -> None:
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify({"ok": False, "error": exc.name.lower().replace(" ", "_"), "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        if app.debug or app.testing:
            return jsonify({"ok": False, "error": "unexpected_error", "message": str(exc)}), 500
        return jsonify({"ok": False, "error": "unexpected_error"}), 500
