"""
Session Guard - Monitor: Event Source Adapter

Translates platform signals into RawEvents. Subscriptions are explicit
objects owned by the adapter and released on detach.
"""

import logging
from typing import Callable, Dict, List, Optional

from session_guard.app.monitor.events import (
    BLOCKED_SHORTCUTS, LEAVE_WARNING, EventCategory, KeyCombo, PlatformEvent, RawEvent
)

logger = logging.getLogger(__name__)

PlatformHandler = Callable[[PlatformEvent], None]


class Subscription:
    """Handle for a single handler registered on a signal source."""

    def __init__(self, source: "SignalSource", category: EventCategory, handler: PlatformHandler):
        self.source = source
        self.category = category
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def release(self):
        """Unregister the handler. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self.source._remove(self.category, self.handler)


class SignalSource:
    """
    Dispatcher for platform signals.

    Platform integrations (see kiosk.qt_signals) feed events in through
    emit(); consumers register per category through subscribe().
    """

    def __init__(self):
        self._handlers: Dict[EventCategory, List[PlatformHandler]] = {
            category: [] for category in EventCategory
        }

    def subscribe(self, category: EventCategory, handler: PlatformHandler) -> Subscription:
        self._handlers[category].append(handler)
        return Subscription(self, category, handler)

    def _remove(self, category: EventCategory, handler: PlatformHandler):
        handlers = self._handlers[category]
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: PlatformEvent) -> PlatformEvent:
        """Deliver an event to every current handler of its category."""
        for handler in list(self._handlers[event.category]):
            handler(event)
        return event

    def listener_count(self, category: Optional[EventCategory] = None) -> int:
        if category is not None:
            return len(self._handlers[category])
        return sum(len(h) for h in self._handlers.values())


class EventSourceAdapter:
    """
    Re-emits platform signals as RawEvents to a single sink.

    Suppresses the platform default for context menus, blocked shortcuts
    and close requests before the sink sees the event.
    """

    def __init__(self, source: SignalSource, sink: Callable[[RawEvent], None]):
        self.source = source
        self.sink = sink
        self._subscriptions: List[Subscription] = []

    @property
    def attached(self) -> bool:
        return bool(self._subscriptions)

    def attach(self) -> List[Subscription]:
        """Subscribe to all signal categories."""
        if self.attached:
            return list(self._subscriptions)

        self._subscriptions = [
            self.source.subscribe(category, self._relay) for category in EventCategory
        ]
        logger.debug(f"Event source adapter attached ({len(self._subscriptions)} subscriptions)")
        return list(self._subscriptions)

    def detach(self):
        """Release all subscriptions. No-op when already detached."""
        if not self._subscriptions:
            return

        for subscription in self._subscriptions:
            subscription.release()
        self._subscriptions = []
        logger.debug("Event source adapter detached")

    def _relay(self, event: PlatformEvent):
        # A source may still hold a copy of its handler list mid-dispatch
        if not self.attached:
            return

        self._suppress_default(event)
        self.sink(RawEvent(event.category, dict(event.payload), event.time))

    def _suppress_default(self, event: PlatformEvent):
        if event.category == EventCategory.CONTEXT_MENU_REQUESTED:
            event.prevent_default()
        elif event.category == EventCategory.KEY_PRESSED:
            if KeyCombo.from_payload(event.payload) in BLOCKED_SHORTCUTS:
                event.prevent_default()
        elif event.category == EventCategory.BEFORE_UNLOAD_REQUESTED:
            event.prevent_default(LEAVE_WARNING)
