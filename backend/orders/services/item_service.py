from django.db import transaction
import logging

from core_backend.exceptions import (
    InvalidTransition,
    OrderItemNotFound,
    ServiceValidationError,
)
from orders.events import OrderEventPublisher
from orders.models import Order, OrderItem
from payments.money import quantize
from products.services import ProductService

logger = logging.getLogger(__name__)


class OrderItemService:
    """Service for managing order items - adding, moving through kitchen statuses, removing."""

    # One-step operator correction backward is allowed among the kitchen
    # statuses; nothing leaves CANCELLED or COMPLETED, and a SERVED item can
    # only be closed out.
    VALID_STATUS_TRANSITIONS = {
        OrderItem.ItemStatus.PENDING: [
            OrderItem.ItemStatus.PREPARING,
            OrderItem.ItemStatus.READY,
            OrderItem.ItemStatus.CANCELLED,
        ],
        OrderItem.ItemStatus.PREPARING: [
            OrderItem.ItemStatus.PENDING,
            OrderItem.ItemStatus.READY,
            OrderItem.ItemStatus.CANCELLED,
        ],
        OrderItem.ItemStatus.READY: [
            OrderItem.ItemStatus.PREPARING,
            OrderItem.ItemStatus.SERVED,
            OrderItem.ItemStatus.CANCELLED,
        ],
        OrderItem.ItemStatus.SERVED: [
            OrderItem.ItemStatus.COMPLETED,
        ],
        OrderItem.ItemStatus.COMPLETED: [],
        OrderItem.ItemStatus.CANCELLED: [],
    }

    @staticmethod
    @transaction.atomic
    def add_item_to_order(
        order_id, product_id, quantity: int = 1, notes: str = "", server=None, event_bus=None
    ) -> OrderItem:
        """
        Add a product to an order at its current price, then recalculate totals.

        Args:
            order_id: Order to add to
            product_id: Product being ordered; its price is snapshotted
            quantity: Number of units (at least 1)
            notes: Kitchen notes for the item
            server: Staff member adding the item

        Raises:
            ServiceValidationError: If quantity is below 1
            OrderNotFound / ProductNotFound: If either reference is missing
            InvalidTransition: If the order is completed or cancelled
        """
        from orders.services.calculation_service import OrderCalculationService
        from orders.services.order_service import OrderService

        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise ServiceValidationError(f"Quantity must be a whole number, got '{quantity}'.")
        if quantity < 1:
            raise ServiceValidationError("Quantity must be at least 1.")

        order = OrderService.get_order(order_id, for_update=True)
        OrderItemService._ensure_order_open(order)

        product = ProductService.get_product(product_id)

        if not product.is_available:
            raise ServiceValidationError(f"{product.name} is not available.")

        unit_price = quantize(product.price)
        item = OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=quantize(unit_price * quantity),
            notes=notes or "",
            server=server,
            status=OrderItem.ItemStatus.PENDING,
        )

        OrderCalculationService.recalculate_order_totals(order)
        OrderEventPublisher(event_bus).order_to_kitchen(order)

        logger.info(f"Added {quantity}x {product.name} to order {order.order_number}")
        return item

    @staticmethod
    @transaction.atomic
    def update_item_status(item_id, new_status: str, order_id=None, event_bus=None) -> OrderItem:
        """
        Move an item through the kitchen statuses.

        Repeating the item's current status is a no-op. Cancelling an item
        recalculates the order's totals.

        Raises:
            ServiceValidationError: If `new_status` is not an item status
            OrderItemNotFound: If the item is missing (or not on `order_id`)
            InvalidTransition: If the move is not allowed, or the order is finished
        """
        from orders.services.calculation_service import OrderCalculationService

        if new_status not in OrderItem.ItemStatus.values:
            raise ServiceValidationError(f"'{new_status}' is not a valid item status.")

        item = OrderItemService._get_item(item_id, order_id, for_update=True)
        order = item.order

        if item.status == new_status:
            return item

        OrderItemService._ensure_order_open(order)

        if new_status not in OrderItemService.VALID_STATUS_TRANSITIONS.get(item.status, []):
            raise InvalidTransition(item.status, new_status)

        previous = item.status
        item.status = new_status
        item.save(update_fields=["status", "updated_at"])

        if new_status == OrderItem.ItemStatus.CANCELLED:
            OrderCalculationService.recalculate_order_totals(order)

        publisher = OrderEventPublisher(event_bus)
        publisher.item_status_changed(item)
        publisher.order_to_kitchen(order)

        logger.info(f"Item {item.pk} on order {order.order_number}: {previous} -> {new_status}")
        return item

    @staticmethod
    @transaction.atomic
    def remove_item(item_id, order_id=None, event_bus=None) -> Order:
        """
        Hard-delete an item (a correction, unlike cancelling) and recalculate totals.

        Raises:
            OrderItemNotFound: If the item is missing (or not on `order_id`)
            InvalidTransition: If the order is completed or cancelled
        """
        from orders.services.calculation_service import OrderCalculationService

        item = OrderItemService._get_item(item_id, order_id, for_update=True)
        order = item.order
        OrderItemService._ensure_order_open(order)

        item.delete()
        OrderCalculationService.recalculate_order_totals(order)
        OrderEventPublisher(event_bus).order_to_kitchen(order)

        logger.info(f"Removed item {item_id} from order {order.order_number}")
        return order

    @staticmethod
    def _get_item(item_id, order_id=None, for_update=False) -> OrderItem:
        queryset = OrderItem.objects.select_related("order", "product")
        if for_update:
            queryset = queryset.select_for_update()
        if order_id is not None:
            queryset = queryset.filter(order_id=order_id)
        try:
            return queryset.get(pk=item_id)
        except (OrderItem.DoesNotExist, ValueError, TypeError):
            raise OrderItemNotFound(item_id)

    @staticmethod
    def _ensure_order_open(order: Order):
        if order.is_terminal:
            raise InvalidTransition(
                order.status,
                message=f"Order {order.order_number} is {order.status}; its items can no longer change.",
            )
