from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.sequences import ORDER_SEQUENCE, save_with_sequence_number
from products.models import Product


class Order(models.Model):
    # --- Status Fields ---
    class OrderStatus(models.TextChoices):
        PENDING = "pending", _("Pending")  # Taken, not yet started by the kitchen
        PREPARING = "preparing", _("Preparing")
        READY = "ready", _("Ready")  # Waiting at the pass
        SERVED = "served", _("Served")  # At the table, awaiting payment
        COMPLETED = "completed", _("Completed")  # Paid
        CANCELLED = "cancelled", _("Cancelled")

    class OrderType(models.TextChoices):
        DINE_IN = "dine_in", _("Dine In")
        TAKEAWAY = "takeaway", _("Takeaway")
        DELIVERY = "delivery", _("Delivery")

    TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    order_number = models.CharField(max_length=20, unique=True, blank=True, null=True)
    order_type = models.CharField(
        max_length=10, choices=OrderType.choices, default=OrderType.DINE_IN
    )
    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )

    # --- Relationships ---
    table = models.ForeignKey(
        "tables.Table",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        help_text=_("Table the order was seated at. Required for dine-in orders."),
    )
    server = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders_served",
    )

    # --- Financial Fields (written only by OrderCalculationService) ---
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(
        null=True, blank=True, help_text=_("Set when the order reaches COMPLETED.")
    )

    class Meta:
        # Show newest orders first, with order_number as secondary sort for same timestamps
        ordering = ["-created_at", "order_number"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["order_type"], name="order_type_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.pk} ({self.order_type}) - {self.status}"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def is_active(self):
        return not self.is_terminal

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if self.order_number:
            return super().save(*args, **kwargs)

        def _save():
            super(Order, self).save(*args, **kwargs)

        save_with_sequence_number(self, ORDER_SEQUENCE, _save)


class OrderItem(models.Model):
    class ItemStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PREPARING = "preparing", _("Preparing")
        READY = "ready", _("Ready for Pickup")
        SERVED = "served", _("Served")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    # Statuses the kitchen still has to act on
    KITCHEN_STATUSES = (ItemStatus.PENDING, ItemStatus.PREPARING, ItemStatus.READY)

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="order_items"
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Product price captured when the item was added."),
    )
    subtotal = models.DecimalField(
        max_digits=10, decimal_places=2, help_text=_("unit_price x quantity")
    )
    status = models.CharField(
        max_length=10, choices=ItemStatus.choices, default=ItemStatus.PENDING
    )
    notes = models.TextField(
        blank=True, help_text=_("Customer notes, e.g., 'no onions'")
    )
    server = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items_added",
        help_text=_("Staff member who added the item."),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "status"], name="orderitem_order_status_idx"),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.product.name} ({self.status})"

    @property
    def is_cancelled(self):
        return self.status == self.ItemStatus.CANCELLED
