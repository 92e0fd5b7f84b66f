from rest_framework import serializers

from .order_item_serializers import staff_name


class KitchenItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    product_name = serializers.CharField(source="product.name")
    product_emoji = serializers.CharField(source="product.emoji")
    category = serializers.CharField(source="product.kitchen_category")
    quantity = serializers.IntegerField()
    status = serializers.CharField()
    notes = serializers.CharField()
    server_name = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField()

    def get_server_name(self, obj):
        return staff_name(obj.server)


class KitchenTicketSerializer(serializers.Serializer):
    """Renders a KitchenTicket."""

    id = serializers.IntegerField(source="order.id")
    order_number = serializers.CharField(source="order.order_number")
    order_type = serializers.CharField(source="order.order_type")
    status = serializers.CharField(source="order.status")
    table_number = serializers.CharField(source="order.table.number", default=None)
    server_name = serializers.SerializerMethodField()
    notes = serializers.CharField(source="order.notes")
    created_at = serializers.DateTimeField(source="order.created_at")
    display_status = serializers.CharField()
    progress = serializers.DictField()
    items = KitchenItemSerializer(many=True)

    def get_server_name(self, obj):
        return staff_name(obj.order.server)
