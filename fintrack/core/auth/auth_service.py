"""Authentication service layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from sqlalchemy import func

from fintrack.core.auth.events import AUTH_USER_LOGGED_OUT, AUTH_USER_REGISTERED
from fintrack.core.auth.models import JWTBlocklist, Role, SessionToken
from fintrack.core.auth.schemas import RegisterRequest
from fintrack.core.users.models import User
from fintrack.extensions import bcrypt, db
from fintrack.platform.outbox import enqueue as enqueue_outbox

DEFAULT_TIMEZONE = "UTC"
# Roles granted to every new account by default.
DEFAULT_REGISTER_ROLES = ("user", "finance:write")


def hash_password(plain_password: str) -> str:
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.check_password_hash(hashed_password, plain_password)


def authenticate_user(email: str, password: str) -> Optional[User]:
    """Return the user if credentials are valid and the user is active."""
    user = User.query.filter(func.lower(User.email) == email.strip().lower()).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def issue_tokens(user: User) -> dict[str, str]:
    """Create access and refresh tokens for a user."""
    identity = str(user.id)
    access_token = create_access_token(identity=identity, additional_claims={"roles": user.role_codes})
    refresh_token = create_refresh_token(identity=identity)

    # Persist refresh jti for revocation checks
    decoded_refresh = decode_token(refresh_token)
    expires = decoded_refresh.get("exp")
    db.session.add(
        SessionToken(
            user_id=user.id,
            jti=decoded_refresh.get("jti"),
            expires_at=datetime.utcfromtimestamp(expires) if expires else None,
        )
    )
    db.session.commit()

    return {"access_token": access_token, "refresh_token": refresh_token}


def is_token_revoked(jti: str) -> bool:
    return db.session.query(JWTBlocklist.id).filter_by(jti=jti).first() is not None


def revoke_refresh_token(user_id: int, jti: str) -> None:
    """Revoke a refresh token by JTI."""
    token = SessionToken.query.filter_by(jti=jti).first()
    if token:
        token.revoked = True
    db.session.add(JWTBlocklist(jti=jti))
    enqueue_outbox(AUTH_USER_LOGGED_OUT, {"user_id": user_id, "jti": jti}, user_id=user_id)
    db.session.commit()


def register_user(payload: RegisterRequest, auto_issue_tokens: bool = False) -> dict:
    """Create a user, assign default roles, and emit the registration event via outbox."""
    normalized_email = payload.email.strip().lower()
    existing = User.query.filter(func.lower(User.email) == normalized_email).first()
    if existing:
        raise ValueError("email_already_exists")

    user = User(
        email=normalized_email,
        full_name=payload.full_name,
        timezone=payload.timezone or DEFAULT_TIMEZONE,
        password_hash=hash_password(payload.password),
    )

    db.session.add(user)
    _assign_default_roles(user)
    db.session.flush()  # ensure user.id for events

    enqueue_outbox(
        AUTH_USER_REGISTERED,
        {"user_id": user.id, "email": user.email, "full_name": user.full_name},
        user_id=user.id,
    )
    db.session.commit()

    tokens = issue_tokens(user) if auto_issue_tokens else {}
    return {"user": user, **tokens}


def _assign_default_roles(user: User) -> None:
    for code in DEFAULT_REGISTER_ROLES:
        role = Role.query.filter_by(name=code).first()
        if not role:
            role = Role(name=code, description=f"Auto-created role {code}")
            db.session.add(role)
        if role not in user.roles:
            user.roles.append(role)
