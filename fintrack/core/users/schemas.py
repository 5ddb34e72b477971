"""Typed schemas for user IO."""

from __future__ import annotations

from typing import List, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from fintrack.core.users.models import User


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    # Response should not re-validate persisted emails (demo domains, etc.)
    id: int
    email: str
    full_name: Optional[str] = None
    timezone: Optional[str] = None
    is_active: bool
    role_codes: List[str] = []

    model_config = ConfigDict(from_attributes=True)


def serialize_user(user: "User") -> UserResponse:
    return UserResponse.model_validate(user)
