"""Simple in-process event bus."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional


@dataclass
class Event:
    """Envelope published to in-process subscribers."""

    event_type: str
    payload: dict = field(default_factory=dict)
    user_id: Optional[int] = None
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


EventHandler = Callable[[Event], None]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: Event) -> None:
        for handler in self._subscribers.get(event.event_type, []):
            handler(event)


# Global singleton
event_bus = EventBus()
