"""Pre-seed inventory rows for a rolling horizon."""

from __future__ import annotations

from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.inventory.ledger import InventoryLedger
from apps.inventory.models import RoomType


class Command(BaseCommand):
    help = "Create missing inventory rows from today up to the configured horizon"

    def add_arguments(self, parser):  # type: ignore
        parser.add_argument("--days", type=int, help="Override INVENTORY_HORIZON_DAYS")
        parser.add_argument("--room-type", type=int, help="Only seed this room type id")

    def handle(self, *args, **options):  # type: ignore
        ledger = InventoryLedger(horizon_days=options.get("days"))
        if ledger.horizon_days < 0:
            raise CommandError("--days must not be negative")

        through = timezone.localdate() + timedelta(days=ledger.horizon_days)
        room_types = RoomType.objects.all()
        if options.get("room_type"):
            room_types = room_types.filter(pk=options["room_type"])
            if not room_types.exists():
                raise CommandError(f"Room type {options['room_type']} does not exist")

        for room_type in room_types:
            created = ledger.seed(room_type.pk, through)
            self.stdout.write(f"{room_type.name}: {created} nights created through {through.isoformat()}")

        self.stdout.write(self.style.SUCCESS("Inventory seeded"))
