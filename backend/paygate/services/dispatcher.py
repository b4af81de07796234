"""Route verified webhook events to per-type handlers.

Handlers are looked up by event type tag. Unknown types and handler failures
are logged and reported in the outcome; neither ever rejects the webhook.
"""

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from paygate.services.webhook_verify import VerifiedEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[VerifiedEvent], None]


class HandlingStatus(str, enum.Enum):
    HANDLED = "handled"
    UNHANDLED = "unhandled"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchOutcome:
    event_id: str
    event_type: str
    status: HandlingStatus
    handler: str | None = None


class EventDispatcher:
    def __init__(self) -> None:
        self._handlers: dict[str, EventHandler] = {}

    def register(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._handlers:
            raise ValueError(f"Handler already registered for {event_type}")
        self._handlers[event_type] = handler

    def on(self, event_type: str) -> Callable[[EventHandler], EventHandler]:
        def decorator(handler: EventHandler) -> EventHandler:
            self.register(event_type, handler)
            return handler

        return decorator

    def handles(self, event_type: str) -> bool:
        return event_type in self._handlers

    @property
    def event_types(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, event: VerifiedEvent) -> DispatchOutcome:
        handler = self._handlers.get(event.type)
        if handler is None:
            logger.info(f"Unhandled event type: {event.type} (id={event.id})")
            return DispatchOutcome(event.id, event.type, HandlingStatus.UNHANDLED)

        name = getattr(handler, "__name__", repr(handler))
        try:
            handler(event)
        except Exception:
            logger.error(
                f"Handler {name} failed for event {event.id} ({event.type})",
                exc_info=True,
            )
            return DispatchOutcome(event.id, event.type, HandlingStatus.FAILED, name)

        return DispatchOutcome(event.id, event.type, HandlingStatus.HANDLED, name)
