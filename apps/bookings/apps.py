from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"
    verbose_name = "Bookings"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application.command_handlers import COMMAND_ROUTES, dispatch

        for command_type in COMMAND_ROUTES:
            message_bus.register_command_handler(command_type, dispatch)
