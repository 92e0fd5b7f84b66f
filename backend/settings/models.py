from django.db import models
from django.utils.translation import gettext_lazy as _


class Setting(models.Model):
    """
    A single runtime configuration value, stored as text.

    Well-known keys are `tax_rate` (percent), `restaurant_name` and `currency`.
    Typed access goes through `settings.config.app_settings`.
    """

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True)
    description = models.CharField(max_length=255, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]
        verbose_name = _("Setting")
        verbose_name_plural = _("Settings")

    def __str__(self):
        return f"{self.key}={self.value}"
