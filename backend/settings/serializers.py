from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Setting


class SettingSerializer(BaseModelSerializer):
    class Meta:
        model = Setting
        fields = ["key", "value", "description", "updated_at"]
        read_only_fields = ["updated_at"]


class SettingValueSerializer(serializers.Serializer):
    """Body of PUT /api/settings/{key}/."""

    value = serializers.CharField(allow_blank=True, trim_whitespace=True)


class BulkSettingsSerializer(serializers.Serializer):
    """Body of POST /api/settings/bulk/: {"settings": {"key": "value", ...}}."""

    settings = serializers.DictField(child=serializers.CharField(allow_blank=True), allow_empty=False)
