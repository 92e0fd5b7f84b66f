from rest_framework import serializers

from core_backend.base import BaseModelSerializer, MoneyField
from orders.serializers.order_item_serializers import staff_name
from .models import Payment


class PaymentSerializer(BaseModelSerializer):
    """Payment row with its order number and the staff member who processed it."""

    order_number = serializers.CharField(source="order.order_number", read_only=True)
    processed_by_name = serializers.SerializerMethodField()
    amount = MoneyField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "payment_number",
            "order",
            "order_number",
            "amount",
            "method",
            "status",
            "transaction_id",
            "processed_by",
            "processed_by_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        select_related_fields = ["order", "processed_by"]

    def get_processed_by_name(self, obj):
        return staff_name(obj.processed_by)


class PaymentCreateSerializer(serializers.Serializer):
    """
    Body of POST /api/payments/. Amount precision and the order's state are
    checked by PaymentService.create_payment.
    """

    order_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    method = serializers.ChoiceField(choices=Payment.PaymentMethod.choices)
    transaction_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)
    processed_by_id = serializers.IntegerField(required=False, allow_null=True)


class RefundPaymentSerializer(serializers.Serializer):
    processed_by_id = serializers.IntegerField(required=False, allow_null=True)
