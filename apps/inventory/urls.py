"""URL routing for the inventory domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import InventoryViewSet

router = DefaultRouter()
router.register(r"", InventoryViewSet, basename="inventory")

urlpatterns = [
    path("", include(router.urls)),
]
