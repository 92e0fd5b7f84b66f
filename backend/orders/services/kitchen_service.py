from dataclasses import dataclass, field
from typing import List, Optional
import logging

from django.db.models import Prefetch

from core_backend.exceptions import ServiceValidationError
from orders.models import Order, OrderItem
from products.models import Category

logger = logging.getLogger(__name__)


@dataclass
class KitchenTicket:
    """One order as the kitchen screen shows it."""

    order: Order
    items: List[OrderItem] = field(default_factory=list)

    @property
    def display_status(self) -> str:
        return KitchenService.aggregate_status(self.items)

    @property
    def progress(self) -> dict:
        return KitchenService.progress(self.items)


class KitchenService:
    """Read-only projection of in-flight orders for kitchen screens."""

    CATEGORY_FILTERS = ("food", "beverage")
    STATUS_FILTERS = ("pending", "preparing", "ready")

    # Aggregate statuses a status filter also accepts
    STATUS_FILTER_MATCHES = {
        "pending": ("pending",),
        "preparing": ("preparing",),
        "ready": ("ready", "partial"),
    }

    DONE_STATUSES = (OrderItem.ItemStatus.SERVED, OrderItem.ItemStatus.COMPLETED)

    @staticmethod
    def aggregate_status(items) -> str:
        """
        Order-level status derived from its non-cancelled items. Display only;
        never stored.
        """
        statuses = [item.status for item in items if item.status != OrderItem.ItemStatus.CANCELLED]
        # Every item cancelled: nothing left to cook
        if not statuses:
            return "completed"

        done = KitchenService.DONE_STATUSES
        if all(s in done for s in statuses):
            return "completed"
        if any(s == OrderItem.ItemStatus.READY for s in statuses) and any(s in done for s in statuses):
            return "partial"
        if all(s == OrderItem.ItemStatus.READY for s in statuses):
            return "ready"
        if any(s == OrderItem.ItemStatus.PREPARING for s in statuses):
            return "preparing"
        return "pending"

    @staticmethod
    def progress(items) -> dict:
        """Share of active items that are ready or served."""
        active = [item for item in items if item.status != OrderItem.ItemStatus.CANCELLED]
        finished = sum(
            1 for item in active
            if item.status == OrderItem.ItemStatus.READY or item.status in KitchenService.DONE_STATUSES
        )
        percent = round(finished * 100 / len(active)) if active else 100
        return {"done": finished, "total": len(active), "percent": percent}

    @staticmethod
    def matches_category(item: OrderItem, category: str) -> bool:
        is_beverage = item.product.kitchen_category == Category.Kind.BEVERAGE
        return is_beverage if category == "beverage" else not is_beverage

    @staticmethod
    def kitchen_queue(category: Optional[str] = None, status: Optional[str] = None) -> List[KitchenTicket]:
        """
        Non-terminal orders that still have kitchen work, oldest first.

        The category filter narrows each order's items before the work check,
        so an order whose only unfinished items are drinks disappears from the
        food view but stays in the unfiltered one.

        Raises:
            ServiceValidationError: If `category` or `status` is not a known filter
        """
        if category and category not in KitchenService.CATEGORY_FILTERS:
            raise ServiceValidationError(
                f"Unknown kitchen category '{category}'. Expected one of: {', '.join(KitchenService.CATEGORY_FILTERS)}."
            )
        if status and status not in KitchenService.STATUS_FILTERS:
            raise ServiceValidationError(
                f"Unknown kitchen status '{status}'. Expected one of: {', '.join(KitchenService.STATUS_FILTERS)}."
            )

        items_queryset = OrderItem.objects.select_related("product__category", "server").order_by("created_at", "id")
        orders = (
            Order.objects.exclude(status__in=Order.TERMINAL_STATUSES)
            .filter(items__status__in=OrderItem.KITCHEN_STATUSES)
            .distinct()
            .select_related("table", "server")
            .prefetch_related(Prefetch("items", queryset=items_queryset))
            .order_by("created_at", "id")
        )

        tickets = []
        for order in orders:
            items = list(order.items.all())
            if category:
                items = [item for item in items if KitchenService.matches_category(item, category)]
            if not any(item.status in OrderItem.KITCHEN_STATUSES for item in items):
                continue

            ticket = KitchenTicket(order=order, items=items)
            if status and ticket.display_status not in KitchenService.STATUS_FILTER_MATCHES[status]:
                continue
            tickets.append(ticket)

        return tickets

    @staticmethod
    def status_counts(tickets: List[KitchenTicket]) -> dict:
        """Ticket counts per kitchen tab; `ready` includes partially served orders."""
        counts = {"all": len(tickets)}
        for name, matches in KitchenService.STATUS_FILTER_MATCHES.items():
            counts[name] = sum(1 for ticket in tickets if ticket.display_status in matches)
        return counts
