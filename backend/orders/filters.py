import django_filters

from core_backend.base.filters import BaseFilterSet
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Order listing filters: ?status=, ?order_type=, ?table=, plus the shared
    ?start_date= / ?end_date= range on created_at.
    """

    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    order_type = django_filters.ChoiceFilter(choices=Order.OrderType.choices)

    class Meta:
        model = Order
        fields = ["status", "order_type", "table", "server"]
