"""
Publishes stable navigation commands to the rest of the application.

Every frame that carries a signal is forwarded as a ``control:command``
event, UNRECOGNIZED included; only NO_SIGNAL is dropped. With
``emit_on_change_only`` a command is published once, when it first
becomes the stable value.
"""

import logging

from core.events import EventBus, Events, COMMAND_SOURCE
from core.types import NavCommand

logger = logging.getLogger(__name__)


class CommandEmitter:
    """Forwards stable commands to EventBus subscribers."""

    def __init__(self, event_bus: EventBus, config: dict = None):
        config = config or {}
        self._bus = event_bus
        self._on_change_only = config.get("emit_on_change_only", False)
        self._source = config.get("source", COMMAND_SOURCE)
        self._last_emitted = None
        self._emit_count = 0

    def emit(self, command: NavCommand) -> bool:
        """Publish `command` unless it is NO_SIGNAL. Returns True if published."""
        if not command.is_signal:
            self._last_emitted = None
            return False
        if self._on_change_only and command == self._last_emitted:
            return False

        self._bus.emit(Events.COMMAND, source=self._source, command=command.label)
        self._last_emitted = command
        self._emit_count += 1
        logger.debug("Emitted command: %s", command.label)
        return True

    def reset(self):
        self._last_emitted = None

    @property
    def emit_count(self) -> int:
        return self._emit_count

    @property
    def on_change_only(self) -> bool:
        return self._on_change_only
