from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import StaffResolutionMixin
from core_backend.base.mixins import OptimizedQuerysetMixin
from core_backend.exceptions import PaymentNotFound
from notifications.bus import get_event_bus
from .filters import PaymentFilter
from .models import Payment
from .serializers import PaymentSerializer, PaymentCreateSerializer, RefundPaymentSerializer
from .services import PaymentService

logger = logging.getLogger(__name__)


class PaymentViewSet(
    OptimizedQuerysetMixin,
    StaffResolutionMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Payments are append-only: they are created at checkout and may later be
    refunded, but never edited or deleted.
    """

    queryset = Payment.objects.all()
    serializer_class = PaymentSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = PaymentFilter
    ordering_fields = ["created_at", "amount", "payment_number"]
    ordering = ["-created_at", "-id"]

    def get_queryset(self):
        return PaymentService.list_payments()

    def get_object(self):
        try:
            return self.get_queryset().get(pk=self.kwargs["pk"])
        except (Payment.DoesNotExist, ValueError):
            raise PaymentNotFound(self.kwargs["pk"])

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Checkout: records the payment, completes the order and frees its table."""
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment = PaymentService.create_payment(
            order_id=data["order_id"],
            amount=data["amount"],
            method=data["method"],
            processed_by=self.resolve_staff(data.get("processed_by_id")),
            transaction_id=data.get("transaction_id"),
            event_bus=get_event_bus(),
        )
        return Response(self.get_serializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path=r"by-order/(?P<order_id>[^/.]+)")
    def by_order(self, request: Request, order_id=None) -> Response:
        payments = PaymentService.payments_for_order(order_id)
        return Response(self.get_serializer(payments, many=True).data)

    @action(detail=True, methods=["post"])
    def refund(self, request: Request, pk=None) -> Response:
        serializer = RefundPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = PaymentService.refund_payment(
            pk, processed_by=self.resolve_staff(serializer.validated_data.get("processed_by_id"))
        )
        return Response(self.get_serializer(payment).data)
