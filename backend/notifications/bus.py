"""
Event bus used to push refetch hints to connected terminals.

The bus carries hints only: subscribers re-read authoritative state from the
database. Delivery is best effort, with no persistence, replay or ordering
guarantee, so a publish failure is logged and never raised to the caller.

One bus is built per process from settings.EVENT_BUS_BACKEND and handed to
services explicitly (see get_event_bus).
"""
import logging
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

# Events the floor services emit
ORDER_TO_KITCHEN = "orderToKitchen"
ORDER_ITEM_STATUS_CHANGED = "orderItemStatusChanged"

# Channel layer message type; dispatched to TerminalConsumer.terminal_event
TERMINAL_EVENT_TYPE = "terminal.event"

Subscriber = Callable[[str, Dict[str, Any]], None]


class EventBus(ABC):
    """Publish/subscribe fanout of named events."""

    @abstractmethod
    def publish(self, event: str, payload: Optional[Dict[str, Any]] = None, sender: Optional[str] = None) -> None:
        """Deliver `event` to every subscriber except `sender`."""

    @abstractmethod
    def subscribe(self, callback: Subscriber, subscriber_id: Optional[str] = None) -> Callable[[], None]:
        """Register `callback(event, payload)`; returns a function that unsubscribes it."""


class ChannelLayerEventBus(EventBus):
    """
    Publishes into the Channels group every TerminalConsumer joins.

    Terminals subscribe over WebSocket, so in-process subscription is not
    available on this bus.
    """

    def __init__(self, group: Optional[str] = None, channel_layer=None):
        self.group = group or getattr(settings, "REALTIME_GROUP", "terminals")
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def publish(self, event, payload=None, sender=None):
        message = {
            "type": TERMINAL_EVENT_TYPE,
            "event": event,
            "payload": payload or {},
            "sender": sender,
        }
        try:
            async_to_sync(self.channel_layer.group_send)(self.group, message)
            logger.debug(f"Published {event} to group {self.group}")
        except Exception as e:
            logger.error(f"Failed to publish {event} to group {self.group}: {e}")

    def subscribe(self, callback, subscriber_id=None):
        raise NotImplementedError(
            "ChannelLayerEventBus does not support in-process subscribers; connect to ws/terminals/ instead."
        )


class InMemoryEventBus(EventBus):
    """
    Synchronous in-process fanout, used by tests and TerminalSession.

    Subscribers run in the publisher's thread. A subscriber that raises is
    logged and skipped; the remaining subscribers still receive the event.
    """

    def __init__(self):
        self._subscribers = {}
        self._next_token = 0
        self._lock = threading.Lock()
        self.published = []

    def publish(self, event, payload=None, sender=None):
        payload = payload or {}
        with self._lock:
            self.published.append((event, payload, sender))
            subscribers = list(self._subscribers.values())

        for subscriber_id, callback in subscribers:
            if sender is not None and subscriber_id == sender:
                continue
            try:
                callback(event, payload)
            except Exception as e:
                logger.error(f"Subscriber {subscriber_id or callback!r} failed on {event}: {e}")

    def subscribe(self, callback, subscriber_id=None):
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = (subscriber_id, callback)

        def unsubscribe():
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    @property
    def subscriber_count(self):
        return len(self._subscribers)

    def events(self, name=None):
        """Published (event, payload) pairs, optionally only those named `name`."""
        return [(event, payload) for event, payload, _ in self.published if name is None or event == name]

    def clear(self):
        with self._lock:
            self.published.clear()


@lru_cache(maxsize=None)
def get_event_bus() -> EventBus:
    """The process-wide bus, built once from settings.EVENT_BUS_BACKEND."""
    backend = getattr(settings, "EVENT_BUS_BACKEND", "notifications.bus.ChannelLayerEventBus")
    bus = import_string(backend)()
    logger.info(f"Event bus initialised: {bus.__class__.__name__}")
    return bus


def reset_event_bus():
    """Forget the process-wide bus so the next get_event_bus() rebuilds it."""
    get_event_bus.cache_clear()
