"""Inventory models for the hotel booking engine."""

from __future__ import annotations

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class RoomType(models.Model):
    """A sellable room category with a nightly base rate."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    base_rate = models.PositiveIntegerField(
        help_text=_("Nightly rate per room in minor currency units."),
    )
    total_rooms = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Physical rooms of this type; ceiling for any night's availability."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room type")
        verbose_name_plural = _("Room types")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_rooms__gte=1),
                name="room_type_has_rooms",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class InventoryDay(models.Model):
    """Rooms still sellable for one room type on one night.

    Rows are changed only by :class:`apps.inventory.ledger.InventoryLedger`.
    """

    room_type = models.ForeignKey(
        RoomType,
        on_delete=models.CASCADE,
        related_name="inventory_days",
    )
    date = models.DateField()
    available_rooms = models.PositiveIntegerField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Inventory day")
        verbose_name_plural = _("Inventory days")
        ordering = ["room_type", "date"]
        constraints = [
            models.UniqueConstraint(
                fields=["room_type", "date"],
                name="inventory_day_unique_room_type_date",
            ),
            models.CheckConstraint(
                condition=models.Q(available_rooms__gte=0),
                name="inventory_day_not_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.room_type_id} @ {self.date}: {self.available_rooms}"
