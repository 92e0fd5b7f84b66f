"""
Signal handlers for the settings app.
Keeps the AppSettings cache in step with the Setting table.
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .models import Setting

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Setting)
@receiver(post_delete, sender=Setting)
def reload_app_settings(sender, instance, **kwargs):
    """
    Reload the AppSettings cache when a Setting is written or removed, so
    configuration changes are visible immediately without a restart.

    A tax rate change also recalculates every in-progress order so their
    stored totals follow the new rate.
    """
    from .config import app_settings

    app_settings.reload()

    if instance.key == "tax_rate":
        from orders.services import OrderCalculationService

        recalculated = OrderCalculationService.recalculate_in_progress_orders()
        logger.info(f"Applied tax rate {app_settings.tax_rate}% to {recalculated} in-progress orders")
