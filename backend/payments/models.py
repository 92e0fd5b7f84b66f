from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.sequences import PAYMENT_SEQUENCE, save_with_sequence_number
from orders.models import Order


class Payment(models.Model):
    """
    A settlement recorded against an order. Payments are append-only history:
    a refund changes the status of the original row rather than adding one.
    """

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentMethod(models.TextChoices):
        CASH = "cash", _("Cash")
        CARD = "card", _("Card")
        DIGITAL_WALLET = "digital_wallet", _("Digital Wallet")

    payment_number = models.CharField(max_length=20, unique=True, blank=True, null=True)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        help_text=_("The current status of the payment."),
    )
    transaction_id = models.CharField(
        max_length=100, blank=True, null=True, help_text=_("Reference from the card terminal or wallet provider.")
    )
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "payment_number"]
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        indexes = [
            models.Index(fields=["order", "status"], name="payment_order_status_idx"),
            models.Index(fields=["created_at"], name="payment_created_at_idx"),
        ]

    def __str__(self):
        return f"Payment {self.payment_number or self.id} for Order {self.order.order_number or self.order_id} - {self.status}"

    def save(self, *args, **kwargs):
        # Generate payment_number only if it's not already set
        if self.payment_number:
            return super().save(*args, **kwargs)

        def _save():
            super(Payment, self).save(*args, **kwargs)

        save_with_sequence_number(self, PAYMENT_SEQUENCE, _save)
