"""Account API controllers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from fintrack.core.auth.identity import current_user_id
from fintrack.core.errors import AppError
from fintrack.core.utils.decorators import csrf_protected, require_roles
from fintrack.core.utils.results import ServiceResult
from fintrack.domains.finance.services.account_service import (
    create_account,
    get_account_with_transactions,
    list_accounts,
)
from fintrack.extensions import limiter

account_api_bp = Blueprint("finance_account_api", __name__)


def _error(exc: AppError):
    result = ServiceResult.failure(exc)
    return jsonify(result.to_dict()), result.status


@account_api_bp.post("/accounts")
@csrf_protected
@require_roles({"finance:write"})
@limiter.limit("30/minute")
def create_account_endpoint():
    payload = request.get_json(silent=True) or {}
    try:
        account = create_account(current_user_id(), payload)
    except AppError as exc:
        return _error(exc)
    return jsonify({"ok": True, "data": account}), 201


@account_api_bp.get("/accounts")
@jwt_required(optional=True)
def list_accounts_endpoint():
    try:
        accounts = list_accounts(current_user_id())
    except AppError as exc:
        return _error(exc)
    return jsonify({"ok": True, "data": accounts}), 200


@account_api_bp.get("/accounts/<int:account_id>")
@jwt_required(optional=True)
def get_account_endpoint(account_id: int):
    try:
        account = get_account_with_transactions(current_user_id(), account_id)
    except AppError as exc:
        return _error(exc)
    return jsonify({"ok": True, "data": account}), 200
