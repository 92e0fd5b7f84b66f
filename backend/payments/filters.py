import django_filters

from core_backend.base.filters import BaseFilterSet
from .models import Payment


class PaymentFilter(BaseFilterSet):
    """
    Payment listing filters: ?status=, ?method=, ?order=, plus the shared
    ?start_date= / ?end_date= range (a date-only end date covers the whole day).
    """

    status = django_filters.ChoiceFilter(choices=Payment.PaymentStatus.choices)
    method = django_filters.ChoiceFilter(choices=Payment.PaymentMethod.choices)

    class Meta:
        model = Payment
        fields = ["status", "method", "order"]
