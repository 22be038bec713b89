"""
Message Bus

Central hub for routing commands and events to their handlers.
Implements the Mediator pattern for decoupling components.
"""

from typing import Any, Callable, Dict, List, Type

import structlog

from shared.domain.base import DomainEvent
from shared.domain.errors import BookingEngineError

logger = structlog.get_logger(__name__)


class MessageBus:
    """
    Message bus for commands and events

    Commands: One handler per command (1:1)
    Events: Multiple handlers per event (1:N)
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        """
        Register an event handler

        Multiple handlers can be registered for the same event type.
        Registering the same handler twice is a no-op.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("bus.event_handler_registered", event_type=event_type.__name__)

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        """
        Register a command handler

        Only one handler can be registered per command type.
        """
        existing = self._command_handlers.get(command_type)
        if existing is not None and existing != handler:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug("bus.command_handler_registered", command=command_type.__name__)

    def handle_command(self, command: Any) -> Any:
        """
        Handle a command

        Returns the result from the command handler. Engine errors are the
        expected outcome of a rejected request and are re-raised unchanged.
        """
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise ValueError(
                f"No handler registered for command {command_type.__name__}"
            )

        logger.info("bus.command", command=command_type.__name__)
        try:
            return handler(command)
        except BookingEngineError as e:
            logger.info("bus.command_rejected", command=command_type.__name__, code=e.code, reason=e.message)
            raise
        except Exception as e:
            logger.error("bus.command_failed", command=command_type.__name__, error=str(e), exc_info=True)
            raise

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type will be called.
        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug("bus.no_subscribers", event_type=event.name)
                continue

            logger.info("bus.publish", event_type=event.name, event_id=str(event.event_id))

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        "bus.event_handler_failed",
                        handler=getattr(handler, '__name__', repr(handler)),
                        event_type=event.name,
                        error=str(e),
                        exc_info=True,
                    )


# Global message bus instance
message_bus = MessageBus()
