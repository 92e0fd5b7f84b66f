from django.db import models
from django.utils.translation import gettext_lazy as _


class Table(models.Model):
    """
    A physical table on the restaurant floor.

    `current_order` is a weak pointer to the order seated here. A table is
    occupied exactly while that order is neither completed nor cancelled;
    only TableService moves a table in or out of OCCUPIED.
    """

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        OCCUPIED = "occupied", _("Occupied")
        RESERVED = "reserved", _("Reserved")
        CLEANING = "cleaning", _("Cleaning")

    number = models.CharField(
        max_length=20, unique=True, help_text=_("Number shown on the floor plan.")
    )
    capacity = models.PositiveIntegerField(default=4)
    location = models.CharField(
        max_length=50, blank=True, help_text=_("Floor area, e.g. 'Main Hall' or 'Terrace'.")
    )
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.AVAILABLE, db_index=True
    )
    current_order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("Order currently seated at this table."),
    )
    reserved_for = models.CharField(
        max_length=100, blank=True, null=True, help_text=_("Name the reservation is held under.")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Table")
        verbose_name_plural = _("Tables")
        ordering = ["location", "number"]
        indexes = [
            models.Index(fields=["status", "number"], name="table_status_number_idx"),
        ]

    def __str__(self):
        return f"Table {self.number} ({self.status})"

    @property
    def is_bound(self):
        return self.current_order_id is not None
