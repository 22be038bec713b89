"""Load the default guest booking rules and group deposit bands."""

from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand  # type: ignore
from django.db import transaction  # type: ignore

from apps.bookings.models import GuestBookingRule
from apps.rates.deposits import DepositPolicyTable
from apps.rates.models import DepositPolicy

DEFAULT_RULES = (
    # classification, max_days_advance, min_days_notice
    ("standard", 90, 3),
    ("priority", 365, 2),
    ("organizational", 180, 1),
)

DEFAULT_BANDS = (
    # min_rooms, max_rooms, percent
    (2, 9, Decimal("10")),
    (10, 19, Decimal("20")),
    (20, 9999, Decimal("30")),
)


class Command(BaseCommand):
    help = "Create default guest booking rules and deposit bands (existing rows are left alone)"

    def add_arguments(self, parser):  # type: ignore
        parser.add_argument("--skip-deposits", action="store_true", help="Only seed guest booking rules")

    @transaction.atomic
    def handle(self, *args, **options):  # type: ignore
        for classification, max_days_advance, min_days_notice in DEFAULT_RULES:
            _, created = GuestBookingRule.objects.get_or_create(
                classification=classification,
                defaults={"max_days_advance": max_days_advance, "min_days_notice": min_days_notice},
            )
            if created:
                self.stdout.write(f"Rule {classification}: {min_days_notice}-{max_days_advance} days")

        if not options.get("skip_deposits") and not DepositPolicy.objects.filter(active=True).exists():
            for min_rooms, max_rooms, percent in DEFAULT_BANDS:
                DepositPolicy.objects.create(
                    min_rooms=min_rooms,
                    max_rooms=max_rooms,
                    deposit_type=DepositPolicy.DepositType.PERCENT,
                    value=percent,
                )
                self.stdout.write(f"Deposit band [{min_rooms}, {max_rooms}]: {percent}%")

        problems = DepositPolicyTable().partition_problems()
        for problem in problems:
            self.stdout.write(self.style.WARNING(problem))

        self.stdout.write(self.style.SUCCESS("Engine configuration seeded"))
