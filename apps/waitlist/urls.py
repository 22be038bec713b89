"""URL routing for the waitlist."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import WaitlistViewSet

router = DefaultRouter()
router.register(r"", WaitlistViewSet, basename="waitlist")

urlpatterns = [
    path("", include(router.urls)),
]
