from __future__ import annotations

from datetime import datetime, timedelta

import pytest

pytestmark = pytest.mark.integration

from fintrack.core.events.event_bus import EventBus
from fintrack.domains.finance.events import FINANCE_VIEW_INVALIDATED
from fintrack.domains.finance.views import stage_view_invalidations
from fintrack.extensions import db
from fintrack.platform.outbox import EventBusAdapter
from fintrack.platform.outbox.models import OutboxMessage
from fintrack.platform.worker import dispatcher
from fintrack.platform.worker.config import DispatchConfig


def _config(**overrides) -> DispatchConfig:
    defaults = {
        "batch_size": 10,
        "poll_interval": 0,
        "max_attempts": 2,
        "backoff_seconds": 3,
        "backoff_multiplier": 2,
    }
    defaults.update(overrides)
    return DispatchConfig(**defaults)


def _enqueue(user_id: int, event_type: str = "test.event") -> OutboxMessage:
    msg = OutboxMessage(
        user_id=user_id,
        event_type=event_type,
        payload={"hello": "world"},
        status="pending",
        available_at=datetime.utcnow() - timedelta(seconds=1),
    )
    db.session.add(msg)
    db.session.commit()
    return msg


def test_view_invalidations_reach_bus_subscribers(app, user):
    paths = stage_view_invalidations(user.id, [4, 4, 9])
    db.session.commit()
    assert paths == ["/dashboard", "/account/4", "/account/9"]

    bus = EventBus()
    seen: list[str] = []
    bus.subscribe(FINANCE_VIEW_INVALIDATED, lambda event: seen.append(event.payload["path"]))

    processed = dispatcher.process_ready_batch(EventBusAdapter(bus).dispatch, _config())

    assert processed == 3
    assert seen == paths
    statuses = {m.status for m in db.session.query(OutboxMessage).all()}
    assert statuses == {"sent"}


def test_failed_dispatch_backs_off_then_dies(app, user):
    msg = _enqueue(user.id)
    cfg = _config(max_attempts=2, backoff_seconds=4)

    def _send_fail(_):
        raise RuntimeError("boom")

    start = datetime.utcnow()
    dispatcher.process_ready_batch(_send_fail, cfg)
    db.session.refresh(msg)
    assert msg.attempts == 1
    assert msg.status == "retry"
    assert msg.available_at >= start + timedelta(seconds=4)
    assert msg.last_error == "boom"

    msg.available_at = datetime.utcnow() - timedelta(seconds=1)
    db.session.commit()

    dispatcher.process_ready_batch(_send_fail, cfg)
    db.session.refresh(msg)
    assert msg.attempts == 2
    assert msg.status == "dead"


def test_sent_messages_are_not_dispatched_again(app, user):
    msg = _enqueue(user.id)
    sent: list[int] = []

    dispatcher.process_ready_batch(lambda m: sent.append(m.id), _config())

    def _should_not_run(_):
        raise AssertionError("duplicate dispatch attempted")

    assert dispatcher.process_ready_batch(_should_not_run, _config()) == 0
    db.session.refresh(msg)
    assert sent == [msg.id]
    assert msg.status == "sent"


@pytest.mark.unit
def test_backoff_grows_exponentially():
    cfg = _config(backoff_seconds=5, backoff_multiplier=2)

    assert [cfg.backoff_for(n) for n in (1, 2, 3)] == [5, 10, 20]


@pytest.mark.unit
def test_exported_statuses_match_dispatcher_lifecycle():
    from fintrack.platform import outbox

    statuses = {name for name in outbox.__all__ if name.startswith("STATUS_")}
    assert statuses == {"STATUS_PENDING", "STATUS_SENDING", "STATUS_SENT", "STATUS_RETRY", "STATUS_DEAD"}
    assert not hasattr(outbox, "STATUS_FAILED")
