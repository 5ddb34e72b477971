"""View invalidation signals for dashboard and account pages."""

from __future__ import annotations

import logging
from typing import Iterable

from fintrack.core.events.event_bus import Event, event_bus
from fintrack.domains.finance.events import (
    DASHBOARD_VIEW_PATH,
    FINANCE_VIEW_INVALIDATED,
    account_view_path,
)
from fintrack.platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)


def stage_view_invalidations(user_id: int, account_ids: Iterable[int], session=None) -> list[str]:
    """Stage invalidation of the dashboard and each touched account view.

    Messages ride in the caller's transaction, so they only exist once the
    write they describe has committed.
    """
    paths = [DASHBOARD_VIEW_PATH]
    for account_id in dict.fromkeys(account_ids):
        paths.append(account_view_path(account_id))
    for path in paths:
        enqueue_outbox(FINANCE_VIEW_INVALIDATED, {"user_id": user_id, "path": path}, user_id=user_id, session=session)
    return paths


def _on_view_invalidated(event: Event) -> None:
    logger.info("View invalidated for user %s: %s", event.user_id, event.payload.get("path"))


def register_subscriptions(bus=None) -> None:
    (bus or event_bus).subscribe(FINANCE_VIEW_INVALIDATED, _on_view_invalidated)
