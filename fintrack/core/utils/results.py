"""Uniform result envelope returned across service boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from fintrack.core.errors import AppError

T = TypeVar("T")

UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    ok: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    status: int = 200

    @classmethod
    def success(cls, data: T, status: int = 200) -> "ServiceResult[T]":
        return cls(ok=True, data=data, status=status)

    @classmethod
    def failure(cls, exc: Exception) -> "ServiceResult[T]":
        """Map an error to the outward shape; unknown errors collapse to a generic code."""
        if isinstance(exc, AppError):
            return cls(ok=False, error=exc.code, message=exc.message, status=exc.status)
        return cls(
            ok=False,
            error=UNEXPECTED_ERROR,
            message="Something went wrong. Please try again.",
            status=500,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error, "message": self.message}
