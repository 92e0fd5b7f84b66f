"""
Settings Service Layer

Key/value access to runtime settings. Reads go through the AppSettings cache;
writes are upserts and refresh the cache through the post_save signal.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional
import logging

from django.db import transaction

from core_backend.exceptions import ServiceValidationError
from .config import app_settings
from .models import Setting

logger = logging.getLogger(__name__)


def _validate_tax_rate(value: str) -> str:
    try:
        rate = Decimal(value)
    except InvalidOperation:
        raise ServiceValidationError(f"tax_rate must be a number, got '{value}'.")
    if not rate.is_finite() or rate < 0 or rate > 100:
        raise ServiceValidationError("tax_rate must be between 0 and 100.")
    return str(rate)


class SettingsService:
    """
    Service layer for reading and writing runtime settings.
    """

    # Per-key validators; each returns the normalized string value
    VALIDATORS = {
        "tax_rate": _validate_tax_rate,
    }

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> Optional[str]:
        """Value for `key`, the built-in default, or `default` when unknown."""
        return app_settings.get(key, default)

    @staticmethod
    def get_multiple(keys: Iterable[str]) -> Dict[str, Optional[str]]:
        """
        Values for each requested key. Unknown keys map to None so callers can
        tell a missing key from an empty value.
        """
        return {key: app_settings.get(key) for key in keys}

    @staticmethod
    def list_all() -> Dict[str, str]:
        return app_settings.as_dict()

    @staticmethod
    @transaction.atomic
    def update(key: str, value) -> Setting:
        """
        Create or overwrite one setting.

        Raises:
            ServiceValidationError: If the key is blank or the value is invalid for the key
        """
        key = (key or "").strip()
        if not key:
            raise ServiceValidationError("Setting key is required.")

        value = SettingsService.validate_value(key, value)
        setting, created = Setting.objects.update_or_create(key=key, defaults={"value": value})
        logger.info(f"Setting '{key}' {'created' if created else 'updated'}: {value}")
        return setting

    @staticmethod
    @transaction.atomic
    def update_multiple(values: Dict[str, object]) -> Dict[str, str]:
        """
        Upsert several settings in one transaction. Any invalid value rolls
        back every write.
        """
        if not values:
            raise ServiceValidationError("At least one setting is required.")

        updated = {}
        try:
            for key, value in values.items():
                setting = SettingsService.update(key, value)
                updated[setting.key] = setting.value
        except ServiceValidationError:
            # Earlier writes in this batch already reloaded the cache; they are
            # about to be rolled back.
            app_settings.invalidate()
            raise
        return updated

    @staticmethod
    def validate_value(key: str, value) -> str:
        if value is None:
            value = ""
        value = str(value).strip()
        validator = SettingsService.VALIDATORS.get(key)
        return validator(value) if validator else value
