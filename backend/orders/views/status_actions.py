from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from notifications.bus import get_event_bus
from orders.serializers import OrderDetailSerializer, UpdateOrderStatusSerializer
from orders.services import OrderService

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OrderViewSet.
    """

    @action(detail=True, methods=["post", "patch"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        """
        Moves the order to a new status: {"status": "served"}.

        Completing or cancelling releases the order's table.
        """
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.update_order_status(
            pk, serializer.validated_data["status"], event_bus=get_event_bus()
        )
        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderDetailSerializer(order, context=self.get_serializer_context()).data)
