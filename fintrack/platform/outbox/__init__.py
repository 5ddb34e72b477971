"""Transactional outbox models and helpers."""

from fintrack.platform.outbox.models import OutboxMessage
from fintrack.platform.outbox.services import (
    STATUS_DEAD,
    STATUS_PENDING,
    STATUS_RETRY,
    STATUS_SENDING,
    STATUS_SENT,
    EventBusAdapter,
    enqueue,
)

__all__ = [
    "OutboxMessage",
    "enqueue",
    "EventBusAdapter",
    "STATUS_PENDING",
    "STATUS_SENDING",
    "STATUS_SENT",
    "STATUS_RETRY",
    "STATUS_DEAD",
]
