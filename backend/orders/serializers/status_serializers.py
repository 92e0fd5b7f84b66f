from rest_framework import serializers

from orders.models import Order


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Serializer specifically for validating an order status change.
    Transition rules live in OrderService.VALID_STATUS_TRANSITIONS.
    """

    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
