"""
Order item tests.

Adding, moving through kitchen statuses, cancelling and removing items, and
the totals each of those leaves on the order.
"""
import pytest
from decimal import Decimal

from core_backend.exceptions import (
    InvalidTransition,
    OrderItemNotFound,
    OrderNotFound,
    ProductNotFound,
    ServiceValidationError,
)
from orders.models import Order, OrderItem
from orders.services import OrderService, OrderItemService


@pytest.mark.django_db
class TestAddItem:
    """Price snapshot and totals on add."""

    def test_add_item_recalculates_totals(self, dine_in_order, burger):
        """
        Scenario: 2 x 10.00 at 10% tax.
        Expected: subtotal 20.00, tax 2.00, total 22.00.
        """
        item = OrderItemService.add_item_to_order(dine_in_order.id, burger.id, quantity=2)

        assert item.status == OrderItem.ItemStatus.PENDING
        assert item.unit_price == Decimal("10.00")
        assert item.subtotal == Decimal("20.00")

        dine_in_order.refresh_from_db()
        assert dine_in_order.subtotal == Decimal("20.00")
        assert dine_in_order.tax_amount == Decimal("2.00")
        assert dine_in_order.total == Decimal("22.00")

    def test_price_is_snapshotted(self, dine_in_order, burger):
        item = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        burger.price = Decimal("12.00")
        burger.save()

        item.refresh_from_db()
        assert item.unit_price == Decimal("10.00")

    def test_add_records_server_and_notes(self, dine_in_order, burger, staff_user):
        item = OrderItemService.add_item_to_order(
            dine_in_order.id, burger.id, notes="no onions", server=staff_user
        )

        assert item.notes == "no onions"
        assert item.server == staff_user

    @pytest.mark.parametrize("quantity", [0, -1, "two"])
    def test_invalid_quantity(self, dine_in_order, burger, quantity):
        with pytest.raises(ServiceValidationError):
            OrderItemService.add_item_to_order(dine_in_order.id, burger.id, quantity=quantity)

        assert not OrderItem.objects.exists()

    def test_missing_product(self, dine_in_order):
        with pytest.raises(ProductNotFound):
            OrderItemService.add_item_to_order(dine_in_order.id, 9999)

    def test_missing_order(self, burger):
        with pytest.raises(OrderNotFound):
            OrderItemService.add_item_to_order(9999, burger.id)

    def test_unavailable_product(self, dine_in_order, burger):
        burger.is_available = False
        burger.save()

        with pytest.raises(ServiceValidationError):
            OrderItemService.add_item_to_order(dine_in_order.id, burger.id)

    @pytest.mark.parametrize("terminal", [Order.OrderStatus.COMPLETED, Order.OrderStatus.CANCELLED])
    def test_terminal_order_refuses_items(self, dine_in_order, burger, terminal):
        OrderService.update_order_status(dine_in_order.id, terminal)

        with pytest.raises(InvalidTransition):
            OrderItemService.add_item_to_order(dine_in_order.id, burger.id)


@pytest.mark.django_db
class TestItemStatus:
    """Kitchen status machine for items."""

    @pytest.fixture
    def item(self, dine_in_order, burger):
        return OrderItemService.add_item_to_order(dine_in_order.id, burger.id, quantity=2)

    def test_kitchen_progression(self, item):
        for target in ("preparing", "ready", "served", "completed"):
            item = OrderItemService.update_item_status(item.id, target)
            assert item.status == target

    def test_one_step_correction_backward(self, item):
        OrderItemService.update_item_status(item.id, "preparing")
        item = OrderItemService.update_item_status(item.id, "pending")
        assert item.status == "pending"

    def test_two_steps_backward_rejected(self, item):
        OrderItemService.update_item_status(item.id, "ready")

        with pytest.raises(InvalidTransition):
            OrderItemService.update_item_status(item.id, "pending")

    def test_served_item_cannot_be_cancelled(self, item):
        OrderItemService.update_item_status(item.id, "ready")
        OrderItemService.update_item_status(item.id, "served")

        with pytest.raises(InvalidTransition):
            OrderItemService.update_item_status(item.id, "cancelled")

    def test_cancelled_is_final(self, item):
        OrderItemService.update_item_status(item.id, "cancelled")

        with pytest.raises(InvalidTransition):
            OrderItemService.update_item_status(item.id, "pending")

    def test_same_status_is_noop(self, item):
        again = OrderItemService.update_item_status(item.id, "pending")
        assert again.status == "pending"

    def test_cancel_recalculates_totals(self, dine_in_order, item, soda):
        OrderItemService.add_item_to_order(dine_in_order.id, soda.id)

        OrderItemService.update_item_status(item.id, "cancelled")

        dine_in_order.refresh_from_db()
        assert dine_in_order.subtotal == Decimal("2.50")
        assert dine_in_order.tax_amount == Decimal("0.25")
        assert dine_in_order.total == Decimal("2.75")

    def test_unknown_status(self, item):
        with pytest.raises(ServiceValidationError):
            OrderItemService.update_item_status(item.id, "burnt")

    def test_item_must_belong_to_order(self, item, takeaway_order):
        with pytest.raises(OrderItemNotFound):
            OrderItemService.update_item_status(item.id, "preparing", order_id=takeaway_order.id)

    def test_terminal_order_freezes_items(self, dine_in_order, item):
        OrderService.update_order_status(dine_in_order.id, Order.OrderStatus.CANCELLED)

        with pytest.raises(InvalidTransition):
            OrderItemService.update_item_status(item.id, "preparing")


@pytest.mark.django_db
class TestRemoveItem:
    """Hard removal as a correction."""

    def test_remove_recalculates(self, dine_in_order, burger, soda):
        burger_item = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.add_item_to_order(dine_in_order.id, soda.id, quantity=2)

        order = OrderItemService.remove_item(burger_item.id, order_id=dine_in_order.id)

        assert order.subtotal == Decimal("5.00")
        assert order.total == Decimal("5.50")
        assert not OrderItem.objects.filter(pk=burger_item.pk).exists()

    def test_remove_last_item_zeroes_totals(self, dine_in_order, burger):
        item = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)

        order = OrderItemService.remove_item(item.id)

        assert (order.subtotal, order.tax_amount, order.total) == (Decimal("0.00"),) * 3

    def test_remove_missing_item(self):
        with pytest.raises(OrderItemNotFound):
            OrderItemService.remove_item(9999)

    def test_remove_from_completed_order(self, dine_in_order, burger):
        item = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderService.update_order_status(dine_in_order.id, Order.OrderStatus.COMPLETED)

        with pytest.raises(InvalidTransition):
            OrderItemService.remove_item(item.id)
