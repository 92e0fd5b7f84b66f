from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from orders.models import Order
from .order_item_serializers import OrderItemSerializer, staff_name


class OrderSerializer(BaseModelSerializer):
    """Order row for listings; items are left out."""

    table_number = serializers.CharField(source="table.number", read_only=True, default=None)
    server_name = serializers.SerializerMethodField()
    subtotal = MoneyField(read_only=True)
    tax_amount = MoneyField(read_only=True)
    total = MoneyField(read_only=True)
    is_paid = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_type",
            "status",
            "table",
            "table_number",
            "server",
            "server_name",
            "subtotal",
            "tax_amount",
            "total",
            "notes",
            "is_paid",
            "created_at",
            "updated_at",
            "completed_at",
        ]
        read_only_fields = fields
        select_related_fields = ["table", "server"]

    def get_server_name(self, obj):
        return staff_name(obj.server)

    def get_is_paid(self, obj):
        # Listings annotate is_paid; fall back to a query for single objects
        annotated = getattr(obj, "paid", None)
        if annotated is not None:
            return bool(annotated)
        from payments.models import Payment

        return obj.payments.filter(status=Payment.PaymentStatus.PAID).exists()


class OrderDetailSerializer(OrderSerializer):
    """Order with its items, oldest first."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["items"]
        read_only_fields = fields
        prefetch_related_fields = ["items__product", "items__server"]


class OrderCreateSerializer(serializers.Serializer):
    """
    Body of POST /api/orders/. Table rules for each order type are enforced
    by OrderService.create_order.
    """

    order_type = serializers.ChoiceField(choices=Order.OrderType.choices, default=Order.OrderType.DINE_IN)
    table_id = serializers.IntegerField(required=False, allow_null=True)
    server_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
