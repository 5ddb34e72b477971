"""Transaction API controllers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from fintrack.core.auth.identity import current_user_id
from fintrack.core.errors import AppError
from fintrack.core.utils.decorators import csrf_protected, require_roles
from fintrack.core.utils.results import ServiceResult
from fintrack.domains.finance.services.transaction_service import (
    create_transaction,
    get_transaction,
    list_transactions,
    update_transaction,
)
from fintrack.extensions import limiter

transaction_api_bp = Blueprint("finance_transaction_api", __name__)

_FILTER_KEYS = ("account_id", "type", "category", "status", "is_recurring")


def _respond(result: ServiceResult):
    return jsonify(result.to_dict()), result.status


@transaction_api_bp.post("/transactions")
@csrf_protected
@require_roles({"finance:write"})
@limiter.limit("60/minute")
def create_transaction_endpoint():
    payload = request.get_json(silent=True) or {}
    result = create_transaction(current_user_id(), payload, user_agent=request.user_agent.string)
    return _respond(result)


@transaction_api_bp.get("/transactions")
@jwt_required(optional=True)
def list_transactions_endpoint():
    filters = {key: request.args[key] for key in _FILTER_KEYS if request.args.get(key) not in (None, "")}
    return _respond(list_transactions(current_user_id(), filters))


@transaction_api_bp.get("/transactions/<int:transaction_id>")
@jwt_required(optional=True)
def get_transaction_endpoint(transaction_id: int):
    try:
        txn = get_transaction(current_user_id(), transaction_id)
    except AppError as exc:
        return _respond(ServiceResult.failure(exc))
    return jsonify({"ok": True, "data": txn}), 200


@transaction_api_bp.put("/transactions/<int:transaction_id>")
@csrf_protected
@require_roles({"finance:write"})
@limiter.limit("60/minute")
def update_transaction_endpoint(transaction_id: int):
    payload = request.get_json(silent=True) or {}
    return _respond(update_transaction(current_user_id(), transaction_id, payload))
