from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.exceptions import ServiceValidationError
from .serializers import SettingSerializer, SettingValueSerializer, BulkSettingsSerializer
from .services import SettingsService


class SettingViewSet(viewsets.ViewSet):
    """
    Key/value runtime settings.

    Values are returned as strings; unknown keys read as null rather than 404
    so terminals can check for optional settings.
    """

    lookup_field = "key"
    lookup_value_regex = r"[A-Za-z0-9_\-]+"

    def list(self, request):
        return Response(SettingsService.list_all())

    def retrieve(self, request, key=None):
        return Response({"key": key, "value": SettingsService.get(key)})

    def update(self, request, key=None):
        serializer = SettingValueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        setting = SettingsService.update(key, serializer.validated_data["value"])
        return Response(SettingSerializer(setting).data)

    @action(detail=False, methods=["get"])
    def multiple(self, request):
        """
        Fetch several settings at once: ?keys=tax_rate,currency
        """
        keys = [k.strip() for k in request.query_params.get("keys", "").split(",") if k.strip()]
        if not keys:
            raise ServiceValidationError("Query parameter 'keys' is required.")
        return Response(SettingsService.get_multiple(keys))

    @action(detail=False, methods=["post"])
    def bulk(self, request):
        """
        Upsert several settings in one transaction.
        """
        serializer = BulkSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = SettingsService.update_multiple(serializer.validated_data["settings"])
        return Response(updated, status=status.HTTP_200_OK)
