"""Rate configuration models for the hotel booking engine."""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CalendarOverride(models.Model):
    """Per-date rule that blocks sales or changes the nightly rate.

    ``room_type`` NULL applies to every room type unless a type-specific
    override exists for the same date.
    """

    class RuleKind(models.TextChoices):
        BLOCKED = "BLOCKED", _("Blocked")
        RATE_OVERRIDE = "RATE_OVERRIDE", _("Rate override")

    class RateMode(models.TextChoices):
        MULTIPLIER = "MULTIPLIER", _("Multiplier")
        FIXED = "FIXED", _("Fixed rate")

    date = models.DateField()
    room_type = models.ForeignKey(
        "inventory.RoomType",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="calendar_overrides",
    )
    rule_kind = models.CharField(max_length=20, choices=RuleKind.choices)
    rate_mode = models.CharField(max_length=20, choices=RateMode.choices, blank=True)
    rate_value = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Multiplier (e.g. 1.5) or fixed nightly rate in minor units."),
    )
    active = models.BooleanField(default=True)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Calendar override")
        verbose_name_plural = _("Calendar overrides")
        ordering = ["date", "room_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["date", "room_type"],
                condition=models.Q(active=True, room_type__isnull=False),
                name="calendar_override_one_active_per_room_type",
            ),
            models.UniqueConstraint(
                fields=["date"],
                condition=models.Q(active=True, room_type__isnull=True),
                name="calendar_override_one_active_blanket",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(rule_kind="BLOCKED")
                    | models.Q(rule_kind="RATE_OVERRIDE", rate_mode__in=["MULTIPLIER", "FIXED"], rate_value__isnull=False)
                ),
                name="calendar_override_rate_complete",
            ),
        ]
        indexes = [
            models.Index(fields=["date", "active"]),
        ]

    def __str__(self) -> str:
        scope = self.room_type or "all room types"
        if self.rule_kind == self.RuleKind.BLOCKED:
            return f"{self.date}: blocked for {scope}"
        return f"{self.date}: {self.rate_mode} {self.rate_value} for {scope}"

    def clean(self) -> None:
        if self.rule_kind == self.RuleKind.RATE_OVERRIDE:
            if not self.rate_mode or self.rate_value is None:
                raise ValidationError(_("Rate overrides need a rate mode and a rate value."))
            if self.rate_mode == self.RateMode.FIXED and self.rate_value != self.rate_value.to_integral_value():
                raise ValidationError(_("Fixed rates are whole minor currency units."))
        elif self.rate_mode or self.rate_value is not None:
            raise ValidationError(_("Blocked dates carry no rate."))


class DepositPolicy(models.Model):
    """Deposit rule for one ``[min_rooms, max_rooms]`` band of group bookings."""

    class DepositType(models.TextChoices):
        PERCENT = "PERCENT", _("Percent of total")
        FIXED = "FIXED", _("Fixed amount")

    min_rooms = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    max_rooms = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    deposit_type = models.CharField(max_length=10, choices=DepositType.choices)
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Percent (0-100) or fixed amount in minor units."),
    )
    active = models.BooleanField(default=True)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Deposit policy")
        verbose_name_plural = _("Deposit policies")
        ordering = ["min_rooms"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_rooms__gte=models.F("min_rooms")),
                name="deposit_policy_band_ordered",
            ),
            models.CheckConstraint(
                condition=~models.Q(deposit_type="PERCENT") | models.Q(value__lte=100),
                name="deposit_policy_percent_range",
            ),
        ]

    def __str__(self) -> str:
        suffix = "%" if self.deposit_type == self.DepositType.PERCENT else ""
        return f"[{self.min_rooms}, {self.max_rooms}] rooms: {self.value}{suffix}"

    def clean(self) -> None:
        if self.min_rooms is not None and self.max_rooms is not None and self.max_rooms < self.min_rooms:
            raise ValidationError(_("max_rooms must not be below min_rooms."))
        if self.deposit_type == self.DepositType.PERCENT and self.value is not None and self.value > 100:
            raise ValidationError(_("A percentage deposit cannot exceed 100."))
