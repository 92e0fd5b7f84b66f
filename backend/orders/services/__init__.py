"""
Orders services package - modular service layer for order management.

- OrderService: Order lifecycle (create, status transitions, delete)
- OrderItemService: Item management (add, status transitions, remove)
- OrderCalculationService: The single write path for order totals
- KitchenService: Kitchen queue projection
"""

# Core order operations
from .order_service import OrderService

# Calculation operations
from .calculation_service import OrderCalculationService

# Item management
from .item_service import OrderItemService

# Kitchen operations
from .kitchen_service import KitchenService, KitchenTicket

__all__ = [
    # Core
    'OrderService',
    # Calculations
    'OrderCalculationService',
    # Items
    'OrderItemService',
    # Kitchen
    'KitchenService',
    'KitchenTicket',
]
