"""
In-process model of a connected terminal.

A TerminalSession subscribes to an EventBus the way a browser terminal
subscribes to ws/terminals/: it emits events for the other terminals and
marks its views stale when a refetch hint arrives. Used by tooling and tests
that exercise the fanout without a WebSocket.
"""
import logging
from collections import defaultdict

from .bus import ORDER_TO_KITCHEN, ORDER_ITEM_STATUS_CHANGED

logger = logging.getLogger(__name__)

# Which cached view each hint invalidates
STALE_VIEWS = {
    ORDER_TO_KITCHEN: "kitchen_queue",
    ORDER_ITEM_STATUS_CHANGED: "current_order",
}


class TerminalSession:
    def __init__(self, bus, role, name):
        self.bus = bus
        self.role = role
        self.name = name
        self.received = []
        self.stale = {view: False for view in STALE_VIEWS.values()}
        self._handlers = defaultdict(list)
        self._unsubscribe = bus.subscribe(self._dispatch, subscriber_id=name)

    def __repr__(self):
        return f"TerminalSession({self.role!r}, {self.name!r})"

    @property
    def is_open(self):
        return self._unsubscribe is not None

    def emit(self, event, payload=None):
        """Send an event to every other terminal."""
        if not self.is_open:
            raise RuntimeError(f"{self!r} is closed")
        self.bus.publish(event, payload or {}, sender=self.name)

    def on(self, event, handler):
        """Call `handler(payload)` whenever `event` arrives."""
        self._handlers[event].append(handler)

    def refresh(self, view):
        """Record that `view` was re-read from the server."""
        self.stale[view] = False

    def close(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _dispatch(self, event, payload):
        self.received.append((event, payload))

        view = STALE_VIEWS.get(event)
        if view:
            self.stale[view] = True

        for handler in self._handlers.get(event, []):
            try:
                handler(payload)
            except Exception as e:
                logger.error(f"{self!r} handler for {event} failed: {e}")
