"""Caller identity resolution on top of flask-jwt-extended."""

from __future__ import annotations

from typing import Optional

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request


def current_user_id() -> Optional[int]:
    """Return the authenticated user id, or None when no token was presented.

    Malformed or expired tokens still raise through flask-jwt-extended so its
    own 401/422 handlers respond.
    """
    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    if identity in (None, ""):
        return None
    try:
        return int(identity)
    except (TypeError, ValueError):
        return None
