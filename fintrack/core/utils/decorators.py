"""Reusable decorators and request helpers for controllers."""

from __future__ import annotations

import secrets
from functools import wraps
from typing import Callable, Iterable, TypeVar

from flask import current_app, jsonify, request, session
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException

F = TypeVar("F", bound=Callable)

CSRF_TOKEN_SESSION_KEY = "_csrf_token"


def generate_csrf_token() -> str:
    """Return a stable CSRF token per-session."""
    token = session.get(CSRF_TOKEN_SESSION_KEY)
    if not token:
        token = secrets.token_hex(32)
        session[CSRF_TOKEN_SESSION_KEY] = token
    return token


def validate_csrf_token(token: str) -> bool:
    if not token:
        return False
    return secrets.compare_digest(token, session.get(CSRF_TOKEN_SESSION_KEY, ""))


def require_roles(required_roles: Iterable[str]):
    """Enforce that the current JWT includes the given roles."""

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore[misc]
            try:
                verify_jwt_in_request()
            except JWTExtendedException:
                return (
                    jsonify({"ok": False, "error": "unauthenticated", "message": "Unauthorized"}),
                    401,
                )
            roles = set((get_jwt() or {}).get("roles") or [])
            if "admin" in roles or set(required_roles).issubset(roles):
                return fn(*args, **kwargs)
            return jsonify({"ok": False, "error": "forbidden", "message": "Missing role"}), 403

        return wrapper  # type: ignore[return-value]

    return decorator


def csrf_protected(fn: F) -> F:
    """Validate CSRF token from header X-CSRF-Token."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        if not current_app.config.get("WTF_CSRF_ENABLED", True):
            return fn(*args, **kwargs)
        token = request.headers.get("X-CSRF-Token")
        if not validate_csrf_token(token or ""):
            return jsonify({"ok": False, "error": "csrf_failed"}), 403
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
