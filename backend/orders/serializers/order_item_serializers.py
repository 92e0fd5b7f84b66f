from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from orders.models import OrderItem


def staff_name(user):
    """Display name for the staff member on an order or item."""
    if user is None:
        return None
    return user.get_full_name() or user.get_username()


class OrderItemSerializer(BaseModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_emoji = serializers.CharField(source="product.emoji", read_only=True)
    unit_price = MoneyField(read_only=True)
    subtotal = MoneyField(read_only=True)
    server_name = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "order",
            "product",
            "product_name",
            "product_emoji",
            "quantity",
            "unit_price",
            "subtotal",
            "notes",
            "status",
            "server",
            "server_name",
            "created_at",
        ]
        read_only_fields = fields
        select_related_fields = ["product", "server"]

    def get_server_name(self, obj):
        return staff_name(obj.server)


class AddItemSerializer(serializers.Serializer):
    """
    Body of POST /api/orders/{order_pk}/items/.
    """

    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    server_id = serializers.IntegerField(required=False, allow_null=True)


class UpdateOrderItemStatusSerializer(serializers.Serializer):
    """
    Serializer specifically for validating an item's kitchen status change.
    Transition rules live in OrderItemService.
    """

    status = serializers.ChoiceField(choices=OrderItem.ItemStatus.choices)
