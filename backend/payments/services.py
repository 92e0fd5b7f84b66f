from decimal import Decimal
from django.db import transaction
import logging

from core_backend.base.filters import normalize_datetime_value
from core_backend.exceptions import (
    InvalidTransition,
    OrderNotFound,
    PaymentNotFound,
    ServiceValidationError,
)
from orders.models import Order
from .models import Payment

# Import the money precision helpers
from .money import to_decimal, has_at_most_two_places

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Checkout and refunds.

    A payment settles its order in the same transaction: the payment row, the
    order's move to COMPLETED and the release of its table commit together or
    not at all.
    """

    # State transition map - defines valid transitions for Payment.PaymentStatus
    VALID_TRANSITIONS = {
        Payment.PaymentStatus.PENDING: [
            Payment.PaymentStatus.PAID,
            Payment.PaymentStatus.CANCELLED,
        ],
        Payment.PaymentStatus.PAID: [
            Payment.PaymentStatus.REFUNDED,
        ],
        Payment.PaymentStatus.REFUNDED: [],  # Terminal state
        Payment.PaymentStatus.CANCELLED: [],  # Terminal state
    }

    @staticmethod
    def _transition_payment_status(payment: Payment, target_status: str) -> Payment:
        """
        Transitions a payment to a new status with validation.

        Raises:
            InvalidTransition: If the transition is not allowed
        """
        if target_status not in PaymentService.VALID_TRANSITIONS.get(payment.status, []):
            raise InvalidTransition(
                payment.status,
                target_status,
                message=f"Payment {payment.payment_number} is {payment.status} and cannot become {target_status}.",
            )

        old_status = payment.status
        payment.status = target_status
        payment.save(update_fields=["status", "processed_by", "updated_at"])

        logger.info(f"Payment {payment.payment_number}: Status transition {old_status} -> {target_status}")
        return payment

    @staticmethod
    def validate_amount(amount) -> Decimal:
        try:
            value = to_decimal(amount)
        except ValueError as e:
            raise ServiceValidationError(str(e))
        if value <= 0:
            raise ServiceValidationError("Payment amount must be greater than zero.")
        if not has_at_most_two_places(value):
            raise ServiceValidationError("Payment amount cannot have more than two decimal places.")
        return value

    @staticmethod
    @transaction.atomic
    def create_payment(order_id, amount, method: str, processed_by=None, transaction_id=None, event_bus=None) -> Payment:
        """
        Records a paid payment and completes its order.

        Args:
            order_id: Order being settled; must be neither completed nor cancelled
            amount: Amount collected (> 0, at most two decimals)
            method: cash, card or digital_wallet
            processed_by: Staff member taking the payment
            transaction_id: Provider reference, if any

        Raises:
            ServiceValidationError: If amount or method is invalid
            OrderNotFound: If the order does not exist
            InvalidTransition: If the order is already completed or cancelled
        """
        from orders.services import OrderService

        amount = PaymentService.validate_amount(amount)
        if method not in Payment.PaymentMethod.values:
            raise ServiceValidationError(f"'{method}' is not a valid payment method.")

        try:
            order = Order.objects.select_for_update().get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError):
            raise OrderNotFound(order_id)

        if order.is_terminal:
            raise InvalidTransition(
                order.status,
                Order.OrderStatus.COMPLETED,
                message=f"Order {order.order_number} is already {order.status}.",
            )

        payment = Payment(
            order=order,
            amount=amount,
            method=method,
            status=Payment.PaymentStatus.PAID,
            transaction_id=transaction_id or None,
            processed_by=processed_by,
        )
        payment.save()

        # Completes the order, stamps completed_at, releases the table and
        # tells the kitchen to drop the order.
        OrderService.update_order_status(order.pk, Order.OrderStatus.COMPLETED, event_bus=event_bus)

        logger.info(
            f"Payment {payment.payment_number} recorded for order {order.order_number}: "
            f"{payment.amount} by {payment.method}"
        )
        return payment

    @staticmethod
    @transaction.atomic
    def refund_payment(payment_id, processed_by=None) -> Payment:
        """
        Marks a paid payment refunded. The order stays completed.

        Raises:
            PaymentNotFound: If the payment does not exist
            InvalidTransition: If the payment is not paid
        """
        try:
            payment = Payment.objects.select_for_update().select_related("order").get(pk=payment_id)
        except (Payment.DoesNotExist, ValueError, TypeError):
            raise PaymentNotFound(payment_id)

        if processed_by is not None:
            payment.processed_by = processed_by
        return PaymentService._transition_payment_status(payment, Payment.PaymentStatus.REFUNDED)

    @staticmethod
    def list_payments(start_date=None, end_date=None):
        """
        Payments newest first, optionally within a date range. A date-only
        end date includes the whole day.
        """
        queryset = Payment.objects.select_related("order", "processed_by").order_by("-created_at", "-id")
        if start_date:
            start = normalize_datetime_value(start_date, is_end=False)
            if start is None:
                raise ServiceValidationError(f"Invalid start_date '{start_date}'.")
            queryset = queryset.filter(created_at__gte=start)
        if end_date:
            end = normalize_datetime_value(end_date, is_end=True)
            if end is None:
                raise ServiceValidationError(f"Invalid end_date '{end_date}'.")
            queryset = queryset.filter(created_at__lte=end)
        return queryset

    @staticmethod
    def payments_for_order(order_id):
        if not Order.objects.filter(pk=order_id).exists():
            raise OrderNotFound(order_id)
        return (
            Payment.objects.filter(order_id=order_id)
            .select_related("order", "processed_by")
            .order_by("-created_at", "-id")
        )
