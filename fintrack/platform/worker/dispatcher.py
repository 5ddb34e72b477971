"""Outbox dispatcher helpers and worker loop."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from fintrack.extensions import db
from fintrack.platform.outbox.models import OutboxMessage
from fintrack.platform.outbox.services import (
    STATUS_DEAD,
    STATUS_PENDING,
    STATUS_RETRY,
    STATUS_SENDING,
    STATUS_SENT,
    EventBusAdapter,
)
from fintrack.platform.worker.config import DispatchConfig

logger = logging.getLogger(__name__)

SendFn = Callable[[OutboxMessage], None]


def claim_ready_messages(
    session,
    batch_size: int,
    now: Optional[datetime] = None,
) -> List[OutboxMessage]:
    """
    Lock and return due messages (SKIP LOCKED, oldest first).
    Claimed rows move to 'sending' with their attempt counter bumped.
    """
    now = now or datetime.utcnow()
    stmt = (
        select(OutboxMessage)
        .where(
            OutboxMessage.available_at <= now,
            OutboxMessage.status.in_((STATUS_PENDING, STATUS_RETRY)),
        )
        .order_by(OutboxMessage.available_at, OutboxMessage.id)
        .with_for_update(skip_locked=True)
        .limit(batch_size)
    )
    messages = list(session.scalars(stmt))
    for message in messages:
        message.status = STATUS_SENDING
        message.attempts = (message.attempts or 0) + 1
    return messages


def _schedule_retry(message: OutboxMessage, exc: Exception, config: DispatchConfig) -> None:
    attempts = message.attempts or 1
    next_available = datetime.utcnow() + timedelta(seconds=config.backoff_for(attempts))

    message.last_error = str(exc)
    message.available_at = max(message.available_at or next_available, next_available)
    message.status = STATUS_DEAD if attempts >= config.max_attempts else STATUS_RETRY


def process_ready_batch(
    send_fn: SendFn,
    config: DispatchConfig,
    session=None,
) -> int:
    """
    Claim due messages, hand each to send_fn and record the outcome.
    Returns the number of messages handled (sent or rescheduled).
    """
    session = session or db.session
    try:
        messages = claim_ready_messages(session, batch_size=config.batch_size)
        processed = 0
        for message in messages:
            try:
                send_fn(message)
            except Exception as exc:
                logger.warning(
                    "Outbox message %s (%s) failed on attempt %s: %s",
                    message.id,
                    message.event_type,
                    message.attempts,
                    exc,
                )
                _schedule_retry(message, exc, config)
            else:
                message.status = STATUS_SENT
                message.last_error = None
            processed += 1
        session.commit()
        return processed
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Database error while processing outbox batch")
        return 0


def run_dispatcher(
    config: Optional[DispatchConfig] = None,
    send_fn: Optional[SendFn] = None,
) -> None:
    """Run the dispatcher loop; defaults to publishing to the in-process bus."""
    cfg = config or DispatchConfig.from_env()
    dispatch_callable = send_fn or EventBusAdapter().dispatch

    logger.info(
        "Starting outbox dispatcher (batch_size=%s, poll_interval=%ss, max_attempts=%s)",
        cfg.batch_size,
        cfg.poll_interval,
        cfg.max_attempts,
    )

    try:
        while True:
            processed = process_ready_batch(dispatch_callable, cfg)
            time.sleep(cfg.poll_interval if processed == 0 else min(0.1, cfg.poll_interval))
    except KeyboardInterrupt:
        logger.info("Dispatcher stopped by user")
