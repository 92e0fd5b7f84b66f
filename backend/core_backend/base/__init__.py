"""
Core backend base components.

Foundational viewset and serializer classes shared by every app so endpoints
behave consistently (filtering, ordering, error rendering).
"""

from .viewsets import BaseViewSet, StaffResolutionMixin
from .serializers import BaseModelSerializer, MoneyField

__all__ = [
    # ViewSets
    'BaseViewSet',
    'StaffResolutionMixin',

    # Serializers
    'BaseModelSerializer',
    'MoneyField',
]
