"""
Kitchen queue projection tests.

The queue lists in-flight orders with outstanding kitchen work, optionally
narrowed to one station (food / beverage) or one tab of the kitchen screen.
"""
import pytest
from types import SimpleNamespace

from core_backend.exceptions import ServiceValidationError
from orders.models import Order
from orders.services import KitchenService, OrderService, OrderItemService


def items(*statuses):
    return [SimpleNamespace(status=s) for s in statuses]


class TestAggregateStatus:
    """Order-level display status from item statuses."""

    @pytest.mark.parametrize(
        "statuses, expected",
        [
            (("pending", "pending"), "pending"),
            (("pending", "preparing"), "preparing"),
            (("ready", "ready"), "ready"),
            (("ready", "served"), "partial"),
            (("ready", "completed"), "partial"),
            (("served", "completed"), "completed"),
            (("ready", "pending"), "pending"),
            (("ready", "preparing"), "preparing"),
            (("ready", "cancelled"), "ready"),
            (("cancelled", "cancelled"), "completed"),
            ((), "completed"),
        ],
    )
    def test_aggregate(self, statuses, expected):
        assert KitchenService.aggregate_status(items(*statuses)) == expected

    def test_progress_counts_ready_and_served(self):
        progress = KitchenService.progress(items("pending", "ready", "served", "cancelled"))
        assert progress == {"done": 2, "total": 3, "percent": 67}

    def test_progress_with_no_active_items(self):
        assert KitchenService.progress(items("cancelled")) == {"done": 0, "total": 0, "percent": 100}


@pytest.mark.django_db
class TestKitchenQueue:
    """kitchen_queue filtering."""

    @pytest.fixture
    def mixed_order(self, dine_in_order, burger, soda):
        """Burger being prepared plus a pending soda."""
        food = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.update_item_status(food.id, "preparing")
        OrderItemService.add_item_to_order(dine_in_order.id, soda.id)
        return dine_in_order

    def test_lists_orders_with_kitchen_work(self, mixed_order):
        tickets = KitchenService.kitchen_queue()

        assert [t.order.id for t in tickets] == [mixed_order.id]
        assert tickets[0].display_status == "preparing"
        assert [i.product.name for i in tickets[0].items] == ["Burger", "Soda"]

    def test_empty_orders_are_skipped(self, takeaway_order):
        assert KitchenService.kitchen_queue() == []

    def test_oldest_first(self, takeaway_order, dine_in_order, burger):
        OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.add_item_to_order(takeaway_order.id, burger.id)

        tickets = KitchenService.kitchen_queue()

        assert [t.order.id for t in tickets] == [takeaway_order.id, dine_in_order.id]

    def test_terminal_orders_are_excluded(self, mixed_order):
        OrderService.update_order_status(mixed_order.id, Order.OrderStatus.CANCELLED)
        assert KitchenService.kitchen_queue() == []

    def test_fully_served_order_drops_out(self, dine_in_order, burger):
        item = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.update_item_status(item.id, "ready")
        OrderItemService.update_item_status(item.id, "served")

        assert KitchenService.kitchen_queue() == []

    def test_beverage_filter(self, mixed_order):
        tickets = KitchenService.kitchen_queue(category="beverage")

        assert len(tickets) == 1
        assert [i.product.name for i in tickets[0].items] == ["Soda"]
        assert tickets[0].display_status == "pending"

    def test_category_applied_before_work_check(self, dine_in_order, burger, soda):
        """
        Burger served, soda still pending: the order stays on the drinks
        screen and the unfiltered screen, but leaves the food screen.
        """
        food = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.update_item_status(food.id, "ready")
        OrderItemService.update_item_status(food.id, "served")
        OrderItemService.add_item_to_order(dine_in_order.id, soda.id)

        assert len(KitchenService.kitchen_queue()) == 1
        assert len(KitchenService.kitchen_queue(category="beverage")) == 1
        assert KitchenService.kitchen_queue(category="food") == []

    def test_uncategorized_products_count_as_food(self, dine_in_order):
        from decimal import Decimal
        from products.models import Product

        bread = Product.objects.create(name="Bread", price=Decimal("1.00"))
        OrderItemService.add_item_to_order(dine_in_order.id, bread.id)

        assert len(KitchenService.kitchen_queue(category="food")) == 1
        assert KitchenService.kitchen_queue(category="beverage") == []

    def test_status_filter_ready_includes_partial(self, dine_in_order, takeaway_order, burger, fries):
        partial = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.add_item_to_order(dine_in_order.id, fries.id)
        OrderItemService.update_item_status(partial.id, "ready")
        OrderItemService.update_item_status(partial.id, "served")
        fries_item = dine_in_order.items.get(product=fries)
        OrderItemService.update_item_status(fries_item.id, "ready")

        waiting = OrderItemService.add_item_to_order(takeaway_order.id, burger.id)

        ready = KitchenService.kitchen_queue(status="ready")
        pending = KitchenService.kitchen_queue(status="pending")

        assert [t.order.id for t in ready] == [dine_in_order.id]
        assert ready[0].display_status == "partial"
        assert [t.order.id for t in pending] == [waiting.order_id]

    def test_status_counts(self, mixed_order, takeaway_order, burger):
        OrderItemService.add_item_to_order(takeaway_order.id, burger.id)

        counts = KitchenService.status_counts(KitchenService.kitchen_queue())

        assert counts == {"all": 2, "pending": 1, "preparing": 1, "ready": 0}

    @pytest.mark.parametrize("kwargs", [{"category": "dessert"}, {"status": "served"}])
    def test_unknown_filters(self, kwargs):
        with pytest.raises(ServiceValidationError):
            KitchenService.kitchen_queue(**kwargs)
