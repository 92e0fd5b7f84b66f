from django.db import transaction
from django.utils import timezone
import logging

from orders.calculators import OrderCalculator
from orders.models import Order
from settings.config import app_settings

logger = logging.getLogger(__name__)


class OrderCalculationService:
    """
    The single write path for an order's subtotal, tax_amount and total.

    Every item insert, removal or cancellation ends with a call to
    recalculate_order_totals, which re-reads the full item set instead of
    applying a delta, so concurrent writers converge on the same totals.
    """

    @staticmethod
    @transaction.atomic
    def recalculate_order_totals(order: Order, tax_rate=None) -> Order:
        """
        Recompute and persist the order's derived money fields.

        The order row is locked for the duration so two recalculations for the
        same order serialize instead of interleaving their writes.
        """
        locked = Order.objects.select_for_update().get(pk=order.pk)
        rate = app_settings.tax_rate if tax_rate is None else tax_rate

        totals = OrderCalculator(locked.items.all(), rate).calculate_totals()

        Order.objects.filter(pk=locked.pk).update(
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
            updated_at=timezone.now(),
        )

        # Keep the caller's instance in step with the row
        order.subtotal = totals.subtotal
        order.tax_amount = totals.tax_amount
        order.total = totals.total

        logger.debug(
            f"Recalculated {order.order_number}: subtotal={totals.subtotal} "
            f"tax={totals.tax_amount} ({rate}%) total={totals.total}"
        )
        return order

    @staticmethod
    def recalculate_in_progress_orders() -> int:
        """
        Re-apply the current tax rate to every non-terminal order.
        Returns the number of orders recalculated.
        """
        rate = app_settings.tax_rate
        count = 0
        for order in Order.objects.exclude(status__in=Order.TERMINAL_STATUSES).only("pk", "order_number"):
            OrderCalculationService.recalculate_order_totals(order, tax_rate=rate)
            count += 1
        return count
