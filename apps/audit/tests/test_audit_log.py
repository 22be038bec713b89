"""Tests for the append-only audit log."""

from __future__ import annotations

import pytest

from apps.audit import services as audit
from apps.audit.models import AuditEntry, AuditLogImmutable

pytestmark = pytest.mark.django_db


def test_record_appends_entry():
    entry = audit.record(
        "ops",
        AuditEntry.Action.INVENTORY_BULK_EDIT,
        before={"available_rooms": {"2025-11-01": 4}},
        after={"available_rooms": {"2025-11-01": 2}},
        reason="Leak in 204",
        metadata={"room_type_id": 1},
    )

    stored = AuditEntry.objects.get(pk=entry.pk)
    assert stored.actor == "ops"
    assert stored.booking is None
    assert stored.after == {"available_rooms": {"2025-11-01": 2}}
    assert stored.metadata == {"room_type_id": 1}


def test_blank_actor_is_recorded_as_system():
    entry = audit.record("", AuditEntry.Action.INVENTORY_BULK_EDIT)
    assert entry.actor == "system"
    assert entry.metadata == {}


def test_entries_cannot_be_saved_again():
    entry = audit.record("ops", AuditEntry.Action.INVENTORY_BULK_EDIT, reason="first")
    entry.reason = "rewritten"

    with pytest.raises(AuditLogImmutable):
        entry.save()
    assert AuditEntry.objects.get(pk=entry.pk).reason == "first"


def test_entries_cannot_be_deleted():
    entry = audit.record("ops", AuditEntry.Action.INVENTORY_BULK_EDIT)

    with pytest.raises(AuditLogImmutable):
        entry.delete()
    with pytest.raises(AuditLogImmutable):
        AuditEntry.objects.all().delete()
    with pytest.raises(AuditLogImmutable):
        AuditEntry.objects.filter(pk=entry.pk).update(reason="x")
    assert AuditEntry.objects.count() == 1
