"""URL routing for the rates domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import RatesViewSet

router = DefaultRouter()
router.register(r"", RatesViewSet, basename="rates")

urlpatterns = [
    path("", include(router.urls)),
]
