from django.db.models import Exists, OuterRef
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet, StaffResolutionMixin
from core_backend.exceptions import OrderNotFound
from notifications.bus import get_event_bus
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    OrderSerializer,
    OrderDetailSerializer,
    OrderCreateSerializer,
    KitchenTicketSerializer,
)
from orders.services import OrderService, KitchenService
from payments.models import Payment
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(StatusActionsMixin, StaffResolutionMixin, BaseViewSet):
    """
    Orders: list (newest first), detail with items, create, status changes,
    delete, plus the active and kitchen projections.

    Totals are read-only here; they change only through item operations.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "order_number", "total", "status"]
    ordering = ["-created_at", "-id"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        paid = Payment.objects.filter(order=OuterRef("pk"), status=Payment.PaymentStatus.PAID)
        return super().get_queryset().annotate(paid=Exists(paid))

    def get_serializer_class(self):
        if self.action == "retrieve":
            return OrderDetailSerializer
        return OrderSerializer

    def get_object(self):
        try:
            return self.get_queryset().get(pk=self.kwargs["pk"])
        except (Order.DoesNotExist, ValueError):
            raise OrderNotFound(self.kwargs["pk"])

    def create(self, request: Request, *args, **kwargs) -> Response:
        """
        Starts an order and seats it at the table (dine-in) in one transaction.
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService.create_order(
            order_type=data["order_type"],
            table_id=data.get("table_id"),
            server=self.resolve_staff(data.get("server_id")),
            notes=data.get("notes", ""),
            event_bus=get_event_bus(),
        )
        order = self.get_queryset().prefetch_related("items").get(pk=order.pk)
        return Response(
            OrderDetailSerializer(order, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        """Only notes may be edited directly."""
        order = self.get_object()
        if "notes" in request.data:
            order = OrderService.update_notes(order.pk, request.data.get("notes"))
        return Response(OrderSerializer(order, context=self.get_serializer_context()).data)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        OrderService.delete_order(kwargs["pk"], event_bus=get_event_bus())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def active(self, request: Request) -> Response:
        """Orders that are neither completed nor cancelled, oldest first."""
        orders = self.filter_queryset(self.get_queryset()).exclude(
            status__in=Order.TERMINAL_STATUSES
        ).order_by("created_at", "id")
        return Response(OrderSerializer(orders, many=True, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"])
    def kitchen(self, request: Request) -> Response:
        """
        Kitchen queue: ?category=food|beverage and ?status=pending|preparing|ready.
        """
        tickets = KitchenService.kitchen_queue(
            category=request.query_params.get("category") or None,
            status=request.query_params.get("status") or None,
        )
        return Response(KitchenTicketSerializer(tickets, many=True).data)

    @action(detail=False, methods=["get"], url_path="kitchen/counts")
    def kitchen_counts(self, request: Request) -> Response:
        """Ticket counts for the kitchen screen's tabs; honours ?category=."""
        tickets = KitchenService.kitchen_queue(category=request.query_params.get("category") or None)
        return Response(KitchenService.status_counts(tickets))
