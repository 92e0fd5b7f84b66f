"""
Event bus tests: in-memory fanout, the channel layer bus, and the process-wide
bus factory.
"""
import pytest

from notifications.bus import (
    ORDER_TO_KITCHEN,
    TERMINAL_EVENT_TYPE,
    ChannelLayerEventBus,
    InMemoryEventBus,
    get_event_bus,
    reset_event_bus,
)


class TestInMemoryEventBus:
    """Synchronous fanout."""

    def test_every_subscriber_receives(self):
        bus = InMemoryEventBus()
        received_a, received_b = [], []
        bus.subscribe(lambda e, p: received_a.append((e, p)))
        bus.subscribe(lambda e, p: received_b.append((e, p)))

        bus.publish(ORDER_TO_KITCHEN, {"orderId": 1})

        assert received_a == received_b == [(ORDER_TO_KITCHEN, {"orderId": 1})]

    def test_sender_is_skipped(self):
        bus = InMemoryEventBus()
        pos, kitchen = [], []
        bus.subscribe(lambda e, p: pos.append(e), subscriber_id="pos-1")
        bus.subscribe(lambda e, p: kitchen.append(e), subscriber_id="kitchen-1")

        bus.publish("orderSent", sender="pos-1")

        assert pos == []
        assert kitchen == ["orderSent"]

    def test_unsubscribe(self):
        bus = InMemoryEventBus()
        received = []
        unsubscribe = bus.subscribe(lambda e, p: received.append(e))

        unsubscribe()
        unsubscribe()
        bus.publish(ORDER_TO_KITCHEN)

        assert received == []
        assert bus.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self, caplog):
        bus = InMemoryEventBus()
        received = []

        def broken(event, payload):
            raise RuntimeError("display crashed")

        bus.subscribe(broken, subscriber_id="kitchen-1")
        bus.subscribe(lambda e, p: received.append(e))

        bus.publish(ORDER_TO_KITCHEN)

        assert received == [ORDER_TO_KITCHEN]
        assert "kitchen-1" in caplog.text

    def test_records_published_events(self):
        bus = InMemoryEventBus()
        bus.publish(ORDER_TO_KITCHEN)
        bus.publish("orderItemStatusChanged", {"itemId": 3, "status": "ready"})

        assert bus.events(ORDER_TO_KITCHEN) == [(ORDER_TO_KITCHEN, {})]
        assert len(bus.events()) == 2

        bus.clear()
        assert bus.events() == []


class RecordingLayer:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def group_send(self, group, message):
        if self.error:
            raise self.error
        self.sent.append((group, message))


class TestChannelLayerEventBus:
    """Publishing into the shared Channels group."""

    def test_publish_sends_terminal_event_to_group(self):
        layer = RecordingLayer()
        bus = ChannelLayerEventBus(group="terminals", channel_layer=layer)

        bus.publish(ORDER_TO_KITCHEN, {"orderId": 5})

        assert layer.sent == [
            (
                "terminals",
                {"type": TERMINAL_EVENT_TYPE, "event": ORDER_TO_KITCHEN, "payload": {"orderId": 5}, "sender": None},
            )
        ]

    def test_publish_failure_is_logged(self, caplog):
        layer = RecordingLayer(error=ConnectionError("redis unreachable"))
        bus = ChannelLayerEventBus(group="terminals", channel_layer=layer)

        bus.publish(ORDER_TO_KITCHEN)

        assert "Failed to publish orderToKitchen" in caplog.text

    def test_group_defaults_to_setting(self, settings):
        settings.REALTIME_GROUP = "floor-7"
        assert ChannelLayerEventBus().group == "floor-7"

    def test_subscribe_is_unsupported(self):
        with pytest.raises(NotImplementedError):
            ChannelLayerEventBus(channel_layer=RecordingLayer()).subscribe(lambda e, p: None)


class TestEventBusFactory:
    """get_event_bus / reset_event_bus."""

    def test_bus_is_built_once(self, event_bus):
        assert get_event_bus() is event_bus
        assert isinstance(event_bus, InMemoryEventBus)

    def test_reset_rebuilds_from_settings(self, settings):
        settings.EVENT_BUS_BACKEND = "notifications.bus.ChannelLayerEventBus"
        reset_event_bus()

        assert isinstance(get_event_bus(), ChannelLayerEventBus)
