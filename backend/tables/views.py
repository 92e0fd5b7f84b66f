from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet
from core_backend.exceptions import TableNotFound
from orders.serializers import OrderDetailSerializer
from .models import Table
from .serializers import TableSerializer, UpdateTableStatusSerializer
from .services import TableService

logger = logging.getLogger(__name__)


class TableViewSet(BaseViewSet):
    """
    Floor tables. Seating and releasing happen through order workflows; this
    endpoint covers floor setup and operator status changes.
    """

    queryset = Table.objects.all()
    serializer_class = TableSerializer
    filterset_fields = ["location", "status"]
    ordering_fields = ["number", "location", "capacity"]
    ordering = ["location", "number"]

    def get_object(self):
        try:
            obj = self.get_queryset().get(pk=self.kwargs["pk"])
        except (Table.DoesNotExist, ValueError):
            raise TableNotFound(self.kwargs["pk"])
        self.check_object_permissions(self.request, obj)
        return obj

    def perform_create(self, serializer):
        table = serializer.save()
        logger.info(f"Table {table.number} created ({table.location or 'no location'})")

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        TableService.delete_table(kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def available(self, request: Request) -> Response:
        tables = TableService.available().select_related("current_order")
        return Response(self.get_serializer(tables, many=True).data)

    @action(detail=False, methods=["get"])
    def active(self, request: Request) -> Response:
        """Tables a POS can seat or resume: available or occupied."""
        tables = TableService.all_active().select_related("current_order")
        return Response(self.get_serializer(tables, many=True).data)

    @action(detail=True, methods=["get"], url_path="active-order")
    def active_order(self, request: Request, pk=None) -> Response:
        """The order currently seated here, with items, or null."""
        order = TableService.get_active_order(pk)
        if order is None:
            return Response(None)
        return Response(OrderDetailSerializer(order, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post", "patch"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        """
        Operator status change: available, cleaning, or reserved with
        `reserved_for`. Pass `force` to free a table still held by an active order.
        """
        serializer = UpdateTableStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        table = TableService.update_status(
            pk,
            data["status"],
            reserved_for=data.get("reserved_for"),
            force=data.get("force", False),
        )
        return Response(self.get_serializer(table).data)
