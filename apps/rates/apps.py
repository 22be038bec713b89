from django.apps import AppConfig


class RatesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.rates"
    label = "rates"
    verbose_name = "Rates"
