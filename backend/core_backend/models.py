from django.db import models
from django.utils.translation import gettext_lazy as _


class SequenceCounter(models.Model):
    """
    Last issued value of a human-readable numbering sequence (orders, payments).

    Rows are advanced with a locked increment so concurrent allocations never
    hand out the same number.
    """

    name = models.CharField(max_length=50, unique=True)
    last_value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Sequence Counter")
        verbose_name_plural = _("Sequence Counters")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name}: {self.last_value}"
