import logging

from django.db import transaction

from notifications.bus import ORDER_TO_KITCHEN, ORDER_ITEM_STATUS_CHANGED

logger = logging.getLogger(__name__)


class OrderEventPublisher:
    """
    Publishes order refetch hints on a given event bus.

    Hints are deferred until the surrounding transaction commits, so no
    terminal is told to refetch state that was later rolled back. Publishing
    is best effort: failures are logged and swallowed.
    """

    def __init__(self, bus):
        self.bus = bus

    def order_to_kitchen(self, order=None):
        """Ask kitchen terminals to re-read the queue."""
        label = getattr(order, "order_number", None) or "queue"
        self._publish_on_commit(ORDER_TO_KITCHEN, {}, label)

    def item_status_changed(self, item):
        """Ask terminals showing the item's order to re-read it."""
        payload = {"itemId": item.pk, "status": item.status}
        self._publish_on_commit(ORDER_ITEM_STATUS_CHANGED, payload, f"item {item.pk}")

    def _publish_on_commit(self, event, payload, label):
        if self.bus is None:
            return

        def send():
            try:
                self.bus.publish(event, payload)
                logger.info(f"Published {event} for {label}")
            except Exception as e:
                logger.error(f"Error publishing {event} for {label}: {e}")

        # Ensure the database transaction is committed before broadcasting
        transaction.on_commit(send)
