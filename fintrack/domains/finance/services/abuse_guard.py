"""Per-user abuse protection consulted before a transaction is created."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from limits import parse
from limits.storage import storage_from_string
from limits.strategies import MovingWindowRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_CREATE_LIMIT = "10/hour"
LIMIT_NAMESPACE = "finance-transaction-create"


class DenyReason(str, enum.Enum):
    RATE_LIMIT = "RATE_LIMIT"
    BOT = "BOT"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None

    def is_denied(self) -> bool:
        return not self.allowed

    def is_rate_limit(self) -> bool:
        return self.reason is DenyReason.RATE_LIMIT


ALLOW = Decision(allowed=True)


class AbuseGuard:
    """Moving-window limit keyed by user id, plus a user-agent blocklist."""

    def __init__(
        self,
        limit: str = DEFAULT_CREATE_LIMIT,
        storage_uri: str = "memory://",
        blocked_user_agents: Iterable[str] = (),
        enabled: bool = True,
    ) -> None:
        self.enabled = enabled
        self.blocked_user_agents = tuple(ua.lower() for ua in blocked_user_agents)
        self._configure(limit, storage_uri)

    def init_app(self, app) -> None:
        self.enabled = app.config.get("ABUSE_GUARD_ENABLED", True)
        self.blocked_user_agents = tuple(
            ua.lower() for ua in app.config.get("ABUSE_BLOCKED_USER_AGENTS", ())
        )
        self._configure(
            app.config.get("TRANSACTION_CREATE_LIMIT", DEFAULT_CREATE_LIMIT),
            app.config.get("RATELIMIT_STORAGE_URI", "memory://"),
        )
        app.extensions["abuse_guard"] = self

    def _configure(self, limit: str, storage_uri: str) -> None:
        self.limit = parse(limit)
        self._limiter = MovingWindowRateLimiter(storage_from_string(storage_uri))

    def protect(self, user_id: int, requested: int = 1, user_agent: Optional[str] = None) -> Decision:
        if not self.enabled:
            return ALLOW

        agent = (user_agent or "").lower()
        if agent and any(pattern in agent for pattern in self.blocked_user_agents):
            logger.warning("Blocked transaction create for user %s (user agent %r)", user_id, user_agent)
            return Decision(allowed=False, reason=DenyReason.BOT)

        if not self._limiter.hit(self.limit, LIMIT_NAMESPACE, str(user_id), cost=requested):
            logger.warning("Rate limit exceeded for user %s on transaction create", user_id)
            return Decision(allowed=False, reason=DenyReason.RATE_LIMIT)
        return ALLOW


abuse_guard = AbuseGuard()
