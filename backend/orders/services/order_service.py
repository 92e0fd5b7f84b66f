from django.db import transaction
from django.utils import timezone
import logging

from core_backend.exceptions import (
    InvalidTransition,
    OrderNotFound,
    ServiceValidationError,
)
from orders.events import OrderEventPublisher
from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)


class OrderService:
    """Core service for order lifecycle management - creating, moving through statuses, deleting."""

    # Valid status transitions for order state machine. Forward only; steps may be skipped.
    VALID_STATUS_TRANSITIONS = {
        Order.OrderStatus.PENDING: [
            Order.OrderStatus.PREPARING,
            Order.OrderStatus.READY,
            Order.OrderStatus.SERVED,
            Order.OrderStatus.COMPLETED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.PREPARING: [
            Order.OrderStatus.READY,
            Order.OrderStatus.SERVED,
            Order.OrderStatus.COMPLETED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.READY: [
            Order.OrderStatus.SERVED,
            Order.OrderStatus.COMPLETED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.SERVED: [
            Order.OrderStatus.COMPLETED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.COMPLETED: [],
        Order.OrderStatus.CANCELLED: [],
    }

    # Item statuses the kitchen has started on or handed to the guest; an
    # order holding any of these is not idle and cannot be deleted.
    IN_KITCHEN_ITEM_STATUSES = (
        OrderItem.ItemStatus.PREPARING,
        OrderItem.ItemStatus.READY,
        OrderItem.ItemStatus.SERVED,
    )

    @staticmethod
    def get_order(order_id, for_update: bool = False) -> Order:
        queryset = Order.objects.select_for_update() if for_update else Order.objects.all()
        try:
            return queryset.get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError):
            raise OrderNotFound(order_id)

    @staticmethod
    def active_orders():
        """Non-terminal orders, oldest first."""
        return Order.objects.exclude(status__in=Order.TERMINAL_STATUSES).order_by("created_at", "id")

    @staticmethod
    @transaction.atomic
    def create_order(order_type: str, table_id=None, server=None, notes: str = "", event_bus=None) -> Order:
        """
        Creates a new, empty order and seats it at `table_id` in one transaction.

        Args:
            order_type: dine_in, takeaway or delivery
            table_id: Table to seat the order at (required for dine_in, refused otherwise)
            server: Staff member taking the order
            notes: Free-text notes
            event_bus: Bus used for realtime hints

        Raises:
            ServiceValidationError: If the type is unknown or the table requirement is not met
            TableNotFound / TableUnavailable: If the table cannot be bound
        """
        from tables.services import TableService

        if order_type not in Order.OrderType.values:
            raise ServiceValidationError(f"'{order_type}' is not a valid order type.")

        if order_type == Order.OrderType.DINE_IN and table_id is None:
            raise ServiceValidationError("Dine-in orders require a table.")
        if order_type != Order.OrderType.DINE_IN and table_id is not None:
            raise ServiceValidationError(f"{order_type} orders cannot be seated at a table.")

        order = Order(order_type=order_type, server=server, notes=notes or "")
        if table_id is not None:
            # Validate before allocating a number so a bad id leaves no trace
            order.table = TableService.get_table(table_id)
        order.save()

        if table_id is not None:
            TableService.bind_table(table_id, order)

        logger.info(
            f"Order {order.order_number} created ({order.order_type}"
            f"{f', table {order.table.number}' if order.table_id else ''})"
        )
        return order

    @staticmethod
    @transaction.atomic
    def update_order_status(order_id, new_status: str, event_bus=None) -> Order:
        """
        Moves an order to `new_status`.

        Completing stamps completed_at; completing or cancelling releases the
        order's table. Requesting the current status of an active order is a no-op.

        Raises:
            ServiceValidationError: If `new_status` is not an order status
            InvalidTransition: If the move is not allowed from the current status
        """
        from tables.services import TableService

        if new_status not in Order.OrderStatus.values:
            raise ServiceValidationError(f"'{new_status}' is not a valid order status.")

        order = OrderService.get_order(order_id, for_update=True)

        if order.status == new_status and not order.is_terminal:
            return order

        if new_status not in OrderService.VALID_STATUS_TRANSITIONS.get(order.status, []):
            raise InvalidTransition(order.status, new_status)

        previous = order.status
        order.status = new_status
        update_fields = ["status", "updated_at"]
        if new_status == Order.OrderStatus.COMPLETED:
            order.completed_at = timezone.now()
            update_fields.append("completed_at")
        order.save(update_fields=update_fields)

        if order.is_terminal:
            TableService.release_for_order(order)
            # Finished orders drop off the kitchen screen
            OrderEventPublisher(event_bus).order_to_kitchen(order)

        logger.info(f"Order {order.order_number}: {previous} -> {new_status}")
        return order

    @staticmethod
    @transaction.atomic
    def update_notes(order_id, notes) -> Order:
        """
        Replaces the free-text notes of an open order.

        Raises:
            InvalidTransition: If the order is completed or cancelled
        """
        order = OrderService.get_order(order_id, for_update=True)
        if order.is_terminal:
            raise InvalidTransition(
                order.status,
                message=f"Order {order.order_number} is {order.status}; it can no longer be edited.",
            )

        order.notes = notes or ""
        order.save(update_fields=["notes", "updated_at"])
        return order

    @staticmethod
    @transaction.atomic
    def delete_order(order_id, event_bus=None) -> None:
        """
        Releases the order's table, then deletes the order and its items.

        Only finished orders, or orders the kitchen has not started on, may be
        deleted.

        Raises:
            InvalidTransition: If the kitchen is working on the order's items
        """
        from tables.services import TableService

        order = OrderService.get_order(order_id, for_update=True)

        if not order.is_terminal:
            busy = order.items.filter(status__in=OrderService.IN_KITCHEN_ITEM_STATUSES).exists()
            if busy:
                raise InvalidTransition(
                    order.status,
                    "deleted",
                    message=(
                        f"Order {order.order_number} has items in the kitchen; "
                        f"cancel it instead of deleting it."
                    ),
                )

        released = TableService.release_for_order(order)
        if released and not order.is_terminal:
            logger.warning(f"Freed table held by order {order.order_number} before deleting it")

        had_items = order.items.exists()
        number = order.order_number
        order.delete()

        if had_items:
            OrderEventPublisher(event_bus).order_to_kitchen()
        logger.info(f"Order {number} deleted")
