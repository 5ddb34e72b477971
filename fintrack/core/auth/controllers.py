"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, session
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required
from pydantic import ValidationError

from fintrack.core.auth.auth_service import (
    authenticate_user,
    is_token_revoked,
    issue_tokens,
    register_user,
    revoke_refresh_token,
)
from fintrack.core.auth.schemas import RegisterRequest
from fintrack.core.users.models import User
from fintrack.core.users.schemas import LoginRequest, serialize_user
from fintrack.core.utils.decorators import csrf_protected, generate_csrf_token
from fintrack.extensions import db, jwt, limiter

auth_bp = Blueprint("auth_api", __name__)


@jwt.token_in_blocklist_loader
def _token_revoked(jwt_header, jwt_payload) -> bool:
    if jwt_payload.get("type") != "refresh":
        return False
    return is_token_revoked(jwt_payload.get("jti", ""))


def _jsonable_errors(exc: ValidationError) -> list[dict]:
    errors = exc.errors()
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
    return errors


@auth_bp.post("/register")
@limiter.limit("5/minute")
def register():
    payload = request.get_json(silent=True) or {}
    try:
        data = RegisterRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "bad_request", "details": _jsonable_errors(exc)}),
            400,
        )
    try:
        result = register_user(
            data,
            auto_issue_tokens=current_app.config.get("AUTO_LOGIN_ON_REGISTER", False),
        )
    except ValueError as exc:
        if str(exc) == "email_already_exists":
            return jsonify({"ok": False, "error": "email_already_exists"}), 400
        return jsonify({"ok": False, "error": "registration_failed"}), 400

    resp = {"ok": True, "user": serialize_user(result["user"]).model_dump()}
    if "access_token" in result:
        resp.update(
            {
                "access_token": result["access_token"],
                "refresh_token": result.get("refresh_token"),
                "csrf_token": generate_csrf_token(),
            }
        )
    return jsonify(resp), 201


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    # Ensure login is stateless even if a stale Flask session cookie is present.
    session.clear()
    payload = request.get_json(silent=True) or {}
    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "bad_request", "details": _jsonable_errors(exc)}),
            400,
        )
    user = authenticate_user(data.email, data.password)
    if not user:
        return jsonify({"ok": False, "error": "invalid_credentials"}), 401
    tokens = issue_tokens(user)
    return jsonify(
        {
            "ok": True,
            **tokens,
            "csrf_token": generate_csrf_token(),
            "user": serialize_user(user).model_dump(),
        }
    )


@auth_bp.post("/refresh")
@jwt_required(refresh=True)
@limiter.limit("30/minute")
def refresh():
    user = db.session.get(User, int(get_jwt_identity()))
    if not user or not user.is_active:
        return jsonify({"ok": False, "error": "unauthenticated"}), 401
    new_access = create_access_token(identity=str(user.id), additional_claims={"roles": user.role_codes})
    return jsonify({"ok": True, "access_token": new_access})


@auth_bp.post("/logout")
@jwt_required(refresh=True)
@csrf_protected
def logout():
    jti = get_jwt().get("jti")
    if jti:
        revoke_refresh_token(int(get_jwt_identity()), jti)
    return jsonify({"ok": True})


@auth_bp.get("/me")
@jwt_required()
def me():
    user = db.session.get(User, int(get_jwt_identity()))
    if not user:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "user": serialize_user(user).model_dump()})
