from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend

from .mixins import OptimizedQuerysetMixin


class BaseViewSet(OptimizedQuerysetMixin, viewsets.ModelViewSet):
    """
    Base ViewSet that provides standard configuration for all ModelViewSets.

    Features:
    - Standard filtering and ordering backends
    - Automatic select_related/prefetch_related from the serializer's Meta
    - Consistent error handling (service errors are rendered by
      core_backend.exceptions.floor_exception_handler)

    Usage:
        class TableViewSet(BaseViewSet):
            queryset = Table.objects.all()
            serializer_class = TableSerializer
    """

    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]

    # Default ordering (can be overridden)
    ordering = ['-id']


class StaffResolutionMixin:
    """
    Resolves the staff member acting on a request: an explicit `*_id` in the
    body wins, otherwise the authenticated user, otherwise nobody.
    """

    def resolve_staff(self, user_id=None):
        from django.contrib.auth import get_user_model
        from core_backend.exceptions import ServiceValidationError

        if user_id is not None:
            User = get_user_model()
            try:
                return User.objects.get(pk=user_id)
            except User.DoesNotExist:
                raise ServiceValidationError(f"Staff member {user_id} does not exist.")

        user = getattr(self.request, "user", None)
        if user is not None and getattr(user, "is_authenticated", False):
            return user
        return None
