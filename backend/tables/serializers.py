from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Table


class TableSerializer(BaseModelSerializer):
    """
    Table with its current order number. Status and binding are read-only;
    they change through the status action and order workflows.
    """

    current_order_number = serializers.CharField(
        source="current_order.order_number", read_only=True, default=None
    )
    capacity = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = Table
        fields = [
            "id",
            "number",
            "capacity",
            "location",
            "status",
            "current_order",
            "current_order_number",
            "reserved_for",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["status", "current_order", "reserved_for", "created_at", "updated_at"]
        select_related_fields = ["current_order"]


class UpdateTableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Table.Status.choices)
    reserved_for = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    force = serializers.BooleanField(required=False, default=False)
