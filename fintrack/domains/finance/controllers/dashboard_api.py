"""Dashboard API."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from fintrack.core.auth.identity import current_user_id
from fintrack.core.errors import AppError
from fintrack.core.utils.results import ServiceResult
from fintrack.domains.finance.services.dashboard_service import get_dashboard

dashboard_api_bp = Blueprint("finance_dashboard_api", __name__)


@dashboard_api_bp.get("/dashboard")
@jwt_required(optional=True)
def dashboard():
    try:
        data = get_dashboard(current_user_id())
    except AppError as exc:
        result = ServiceResult.failure(exc)
        return jsonify(result.to_dict()), result.status
    return jsonify({"ok": True, "data": data}), 200
