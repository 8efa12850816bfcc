"""
Lightweight event bus for decoupled inter-module communication.

The pipeline publishes commands and mode changes here instead of calling
consumers directly. Each application owns its own bus instance, so tests
can subscribe to a fresh bus and capture what was published.

Usage:
    bus = EventBus()
    bus.subscribe(Events.COMMAND, my_handler)
    bus.emit(Events.COMMAND, source="gestures", command="Advance")
"""

import time
import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Publish/subscribe event bus with priority-ordered synchronous dispatch."""

    def __init__(self, max_history: int = 100):
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()
        self._event_history = []
        self._max_history = max_history

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener for an event.

        Args:
            event_name: Event to listen for
            callback: Function to call. Receives **kwargs from emit().
            priority: Higher priority callbacks run first (default 0)
        """
        with self._lock:
            self._listeners[event_name].append((priority, callback))
            self._listeners[event_name].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", repr(callback)), priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener for an event."""
        with self._lock:
            self._listeners[event_name] = [
                (p, cb) for p, cb in self._listeners[event_name] if cb is not callback
            ]

    def emit(self, event_name: str, **kwargs):
        """Emit an event to all registered listeners.

        Handler exceptions are logged and never propagate to the publisher.
        """
        with self._lock:
            listeners = list(self._listeners.get(event_name, []))

        self._event_history.append({
            "event": event_name,
            "time": time.time(),
            "data": dict(kwargs),
        })
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]

        for priority, callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", repr(callback)), e)

    def clear(self, event_name: str = None):
        """Remove all listeners, optionally for a specific event."""
        with self._lock:
            if event_name:
                self._listeners.pop(event_name, None)
            else:
                self._listeners.clear()

    @property
    def registered_events(self) -> list:
        """List all events with registered listeners."""
        with self._lock:
            return [name for name, cbs in self._listeners.items() if cbs]

    @property
    def listener_count(self) -> int:
        with self._lock:
            return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10, event_name: str = None) -> list:
        """Get recent event history, optionally filtered by event name."""
        history = self._event_history
        if event_name:
            history = [h for h in history if h["event"] == event_name]
        return history[-last_n:]

    def reset(self):
        """Drop listeners and history."""
        self.clear()
        self._event_history.clear()


# =============================================================================
# Standard Event Names (constants to avoid typos)
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # Outbound navigation command
    COMMAND = "control:command"

    # Pipeline events
    HAND_DETECTED = "hand_detected"
    HAND_LOST = "hand_lost"
    MODE_CHANGED = "mode_changed"

    # Lifecycle
    SYSTEM_STARTED = "system_started"
    SYSTEM_STOPPED = "system_stopped"
    SETUP_FAILED = "setup_failed"


COMMAND_SOURCE = "gestures"
