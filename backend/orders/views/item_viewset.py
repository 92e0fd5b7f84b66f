from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import StaffResolutionMixin
from core_backend.base.mixins import OptimizedQuerysetMixin
from core_backend.exceptions import OrderItemNotFound, OrderNotFound
from notifications.bus import get_event_bus
from orders.models import OrderItem
from orders.serializers import (
    AddItemSerializer,
    OrderDetailSerializer,
    OrderItemSerializer,
    UpdateOrderItemStatusSerializer,
)
from orders.services import OrderItemService, OrderService

logger = logging.getLogger(__name__)


class OrderItemViewSet(
    OptimizedQuerysetMixin,
    StaffResolutionMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    A ViewSet for managing the items within an order
    (/api/orders/{order_pk}/items/).

    Items are never edited in place; quantity or price changes are a remove
    followed by a new add.
    """

    queryset = OrderItem.objects.all()
    serializer_class = OrderItemSerializer

    def get_queryset(self):
        try:
            order_id = int(self.kwargs["order_pk"])
        except (TypeError, ValueError):
            raise OrderNotFound(self.kwargs["order_pk"])
        return super().get_queryset().filter(order_id=order_id).order_by("created_at", "id")

    def list(self, request: Request, *args, **kwargs) -> Response:
        OrderService.get_order(kwargs.get("order_pk"))
        return super().list(request, *args, **kwargs)

    def get_object(self):
        try:
            return self.get_queryset().get(pk=self.kwargs["pk"])
        except (OrderItem.DoesNotExist, ValueError):
            raise OrderItemNotFound(self.kwargs["pk"])

    def create(self, request: Request, order_pk=None) -> Response:
        """
        Adds a product at its current price and recalculates the order totals.
        """
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        item = OrderItemService.add_item_to_order(
            order_pk,
            data["product_id"],
            quantity=data["quantity"],
            notes=data.get("notes", ""),
            server=self.resolve_staff(data.get("server_id")),
            event_bus=get_event_bus(),
        )
        item = self.get_queryset().get(pk=item.pk)
        return Response(OrderItemSerializer(item).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post", "patch"], url_path="status")
    def update_status(self, request: Request, order_pk=None, pk=None) -> Response:
        serializer = UpdateOrderItemStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = OrderItemService.update_item_status(
            pk, serializer.validated_data["status"], order_id=order_pk, event_bus=get_event_bus()
        )
        item = self.get_queryset().get(pk=item.pk)
        return Response(OrderItemSerializer(item).data)

    def destroy(self, request: Request, order_pk=None, pk=None) -> Response:
        """
        Removes the item outright and returns the order with fresh totals.
        """
        order = OrderItemService.remove_item(pk, order_id=order_pk, event_bus=get_event_bus())
        order = (
            type(order).objects.select_related("table", "server")
            .prefetch_related("items__product", "items__server")
            .get(pk=order.pk)
        )
        return Response(OrderDetailSerializer(order).data)
