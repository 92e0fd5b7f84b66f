"""
Order total calculation tests.

Totals are always recomputed from the full item set, so repeated or
interleaved recalculation converges on the same values.
"""
import pytest
from decimal import Decimal
from types import SimpleNamespace

from orders.calculators import OrderCalculator
from orders.models import Order, OrderItem
from orders.services import OrderCalculationService, OrderItemService
from settings.services import SettingsService


def line(subtotal, status="pending"):
    return SimpleNamespace(subtotal=Decimal(subtotal), status=status)


class TestOrderCalculator:
    """Pure arithmetic, no database."""

    def test_basic_totals(self):
        totals = OrderCalculator([line("20.00")], Decimal("10")).calculate_totals()

        assert totals.subtotal == Decimal("20.00")
        assert totals.tax_amount == Decimal("2.00")
        assert totals.total == Decimal("22.00")

    def test_cancelled_items_excluded(self):
        items = [line("20.00"), line("5.00", status="cancelled")]

        totals = OrderCalculator(items, Decimal("10")).calculate_totals()

        assert totals.subtotal == Decimal("20.00")

    def test_empty_order(self):
        totals = OrderCalculator([], Decimal("10")).calculate_totals()
        assert totals.total == Decimal("0.00")

    def test_half_cent_rounds_up(self):
        # 0.25 * 10% = 0.025
        totals = OrderCalculator([line("0.25")], Decimal("10")).calculate_totals()

        assert totals.tax_amount == Decimal("0.03")
        assert totals.total == Decimal("0.28")

    def test_total_rounded_from_unrounded_tax(self):
        # 3 x 3.33 at 8.25%: tax 0.824175
        totals = OrderCalculator([line("3.33")] * 3, Decimal("8.25")).calculate_totals()

        assert totals.subtotal == Decimal("9.99")
        assert totals.tax_amount == Decimal("0.82")
        assert totals.total == Decimal("10.81")

    def test_zero_tax_rate(self):
        totals = OrderCalculator([line("7.50")], Decimal("0")).calculate_totals()
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total == Decimal("7.50")


@pytest.mark.django_db
class TestRecalculationService:
    """Write path for stored totals."""

    def test_recalculation_is_idempotent(self, dine_in_order, burger):
        OrderItemService.add_item_to_order(dine_in_order.id, burger.id, quantity=2)

        first = OrderCalculationService.recalculate_order_totals(dine_in_order)
        second = OrderCalculationService.recalculate_order_totals(dine_in_order)

        assert (first.subtotal, first.tax_amount, first.total) == (second.subtotal, second.tax_amount, second.total)

    def test_recalculation_repairs_drifted_totals(self, dine_in_order, burger):
        OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        Order.objects.filter(pk=dine_in_order.pk).update(subtotal=Decimal("999.00"), total=Decimal("999.00"))

        OrderCalculationService.recalculate_order_totals(dine_in_order)

        dine_in_order.refresh_from_db()
        assert dine_in_order.subtotal == Decimal("10.00")
        assert dine_in_order.total == Decimal("11.00")

    def test_item_changes_converge(self, dine_in_order, burger, fries, soda):
        """Totals match the surviving items whatever order the changes ran in."""
        a = OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.add_item_to_order(dine_in_order.id, fries.id, quantity=2)
        c = OrderItemService.add_item_to_order(dine_in_order.id, soda.id)
        OrderItemService.update_item_status(a.id, OrderItem.ItemStatus.CANCELLED)
        OrderItemService.remove_item(c.id)

        dine_in_order.refresh_from_db()
        assert dine_in_order.subtotal == Decimal("9.00")
        assert dine_in_order.tax_amount == Decimal("0.90")
        assert dine_in_order.total == Decimal("9.90")

    def test_explicit_tax_rate(self, dine_in_order, burger):
        OrderItemService.add_item_to_order(dine_in_order.id, burger.id)

        order = OrderCalculationService.recalculate_order_totals(dine_in_order, tax_rate=Decimal("5"))

        assert order.tax_amount == Decimal("0.50")

    def test_tax_rate_setting_recalculates_open_orders(self, dine_in_order, takeaway_order, burger):
        """
        Changing tax_rate re-applies it to in-progress orders; finished
        orders keep the totals they were settled at.
        """
        OrderItemService.add_item_to_order(dine_in_order.id, burger.id)
        OrderItemService.add_item_to_order(takeaway_order.id, burger.id)
        Order.objects.filter(pk=takeaway_order.pk).update(status=Order.OrderStatus.COMPLETED)

        SettingsService.update("tax_rate", "20")

        dine_in_order.refresh_from_db()
        takeaway_order.refresh_from_db()
        assert dine_in_order.tax_amount == Decimal("2.00")
        assert dine_in_order.total == Decimal("12.00")
        assert takeaway_order.tax_amount == Decimal("1.00")
