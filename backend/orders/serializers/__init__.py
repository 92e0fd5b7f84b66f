"""
Orders serializers package - modular serializer layer.
"""

# Order item serializers
from .order_item_serializers import (
    OrderItemSerializer,
    AddItemSerializer,
    UpdateOrderItemStatusSerializer,
)

# Order serializers
from .order_serializers import (
    OrderSerializer,
    OrderDetailSerializer,
    OrderCreateSerializer,
)

# Status serializers
from .status_serializers import UpdateOrderStatusSerializer

# Kitchen serializers
from .kitchen_serializers import KitchenTicketSerializer, KitchenItemSerializer

__all__ = [
    # Order items
    'OrderItemSerializer',
    'AddItemSerializer',
    'UpdateOrderItemStatusSerializer',
    # Orders
    'OrderSerializer',
    'OrderDetailSerializer',
    'OrderCreateSerializer',
    # Status
    'UpdateOrderStatusSerializer',
    # Kitchen
    'KitchenTicketSerializer',
    'KitchenItemSerializer',
]
