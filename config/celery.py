import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("hotel_booking_engine")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel unpaid provisional bookings - every minute (no-op unless
    # PROVISIONAL_HOLD_MINUTES is configured)
    "release-expired-holds": {
        "task": "bookings.release_expired_holds",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Move checked-out stays to COMPLETED - hourly
    "complete-checked-out-bookings": {
        "task": "bookings.complete_checked_out_bookings",
        "schedule": crontab(minute=15),
    },
    # Expire waitlist notifications nobody acted on - every 15 minutes
    "expire-waitlist-notifications": {
        "task": "waitlist.expire_notified_entries",
        "schedule": crontab(minute="*/15"),
    },
    # Keep inventory rows seeded up to the rolling horizon - daily
    "extend-inventory-horizon": {
        "task": "inventory.extend_inventory_horizon",
        "schedule": crontab(minute=30, hour=2),
    },
}

app.conf.timezone = "UTC"
