"""Finance-specific errors raised by collaborators around transaction writes."""

from __future__ import annotations

from fintrack.core.errors import AppError


class RateLimited(AppError):
    code = "rate_limited"
    status = 429
    default_message = "Too many requests. Please try again later."


class Blocked(AppError):
    code = "blocked"
    status = 403
    default_message = "Request blocked"


class ExtractionFailed(AppError):
    code = "extraction_failed"
    status = 502
    default_message = "Failed to scan receipt"
