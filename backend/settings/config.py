"""
Centralized configuration management using the Singleton pattern.
This module provides a single point of access to runtime settings,
eliminating the need for direct database queries from business logic.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Optional
from django.conf import settings as django_settings
import logging

logger = logging.getLogger(__name__)


DEFAULTS = {
    "restaurant_name": "Restaurant",
    "currency": "USD",
}


class AppSettings:
    """
    A LAZY singleton class that provides centralized access to runtime settings.
    It defers database loading until the first setting is accessed, allowing management
    commands like 'migrate' to run before the settings table exists.
    """

    _instance: Optional["AppSettings"] = None

    def __new__(cls) -> "AppSettings":
        """
        Implement the singleton pattern to ensure only one instance exists.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._values = None
        return cls._instance

    def _setup(self) -> Dict[str, str]:
        if self._values is None:
            self.load_settings()
        return self._values

    def load_settings(self) -> None:
        """
        Load every Setting row into memory.
        """
        # Import here to avoid circular imports
        from .models import Setting

        self._values = dict(Setting.objects.values_list("key", "value"))
        logger.debug(f"Loaded {len(self._values)} runtime settings")

    def reload(self) -> None:
        """
        Reload settings from the database.
        Called when settings are updated to refresh the cache.
        """
        self.load_settings()
        logger.info("AppSettings cache reloaded")

    def invalidate(self) -> None:
        """Drop the cache; the next access reloads lazily."""
        self._values = None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        values = self._setup()
        if key in values:
            return values[key]
        return self._defaults().get(key, default)

    def _defaults(self) -> Dict[str, str]:
        return {**DEFAULTS, "tax_rate": str(getattr(django_settings, "DEFAULT_TAX_RATE", "10"))}

    def as_dict(self) -> Dict[str, str]:
        """Every known setting, stored values over defaults."""
        values = self._defaults()
        values.update(self._setup())
        return values

    @property
    def tax_rate(self) -> Decimal:
        """
        Tax rate in percent. Falls back to DEFAULT_TAX_RATE when the stored
        value is missing or unparseable.
        """
        fallback = Decimal(str(getattr(django_settings, "DEFAULT_TAX_RATE", "10")))
        raw = self.get("tax_rate")
        if raw in (None, ""):
            return fallback
        try:
            return Decimal(str(raw))
        except InvalidOperation:
            logger.warning(f"Invalid tax_rate setting '{raw}', using default {fallback}")
            return fallback

    @property
    def restaurant_name(self) -> str:
        return self.get("restaurant_name")

    @property
    def currency(self) -> str:
        return self.get("currency")


# Create the single, globally accessible instance of the settings.
app_settings = AppSettings()
