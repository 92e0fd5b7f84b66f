import django_filters
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date
from datetime import datetime, time
import logging

logger = logging.getLogger(__name__)


def normalize_datetime_value(value, *, is_end=False):
    """
    Normalize a date or datetime string to a timezone-aware datetime.

    Args:
        value: Can be a string (date or datetime), date object, or datetime object
        is_end: If True and value is date-only, returns end of day (23:59:59.999999)
                If False, returns start of day (00:00:00)

    Examples:
        normalize_datetime_value("2025-11-11", is_end=False)  # 2025-11-11 00:00:00
        normalize_datetime_value("2025-11-11", is_end=True)   # 2025-11-11 23:59:59.999999
        normalize_datetime_value("2025-11-11T10:30:00Z")      # 2025-11-11 10:30:00 (unchanged)
    """
    if not value:
        return value

    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return value

    if isinstance(value, str):
        # Date-only first: parse_datetime also accepts "2025-11-11" (as midnight)
        try:
            date_value = parse_date(value)
            dt = None if date_value else parse_datetime(value)
        except ValueError:
            # Well formed but out of range, e.g. "2025-13-40"
            return None
        if date_value is None:
            if dt is None:
                return None
            if timezone.is_naive(dt):
                return timezone.make_aware(dt)
            return dt
        value = date_value

    # date object
    dt = datetime.combine(value, time.max if is_end else time.min)
    return timezone.make_aware(dt)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base filter set with the date range every listing screen uses.

    `start_date` / `end_date` accept either dates or datetimes. A date-only
    end date covers the whole day.
    """

    start_date = django_filters.CharFilter(method='filter_start_date')
    end_date = django_filters.CharFilter(method='filter_end_date')

    # Field filtered by start_date / end_date
    date_field = 'created_at'

    def filter_start_date(self, queryset, name, value):
        start = normalize_datetime_value(value, is_end=False)
        if start is None:
            logger.info(f"Ignoring unparseable start_date '{value}'")
            return queryset
        return queryset.filter(**{f"{self.date_field}__gte": start})

    def filter_end_date(self, queryset, name, value):
        end = normalize_datetime_value(value, is_end=True)
        if end is None:
            logger.info(f"Ignoring unparseable end_date '{value}'")
            return queryset
        return queryset.filter(**{f"{self.date_field}__lte": end})
