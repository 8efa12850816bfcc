"""
Logging setup plus an event-bus listener that records published commands
and mode changes.
"""

import os
import time
import logging
import logging.handlers
from functools import wraps

from core.events import EventBus, Events


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-28s | %(message)s"
    date_format = "%H:%M:%S"
    level_value = getattr(logging, str(level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level_value)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class CommandLogger:
    """Logs commands and mode changes published on an EventBus.

    Repeated identical commands are counted rather than logged on every
    frame, so the log shows one line per command change.
    """

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("gesture_events")
        self._history = []
        self._max_history = max_history
        self._last_command = None
        self._repeat = 0

    def attach(self, bus: EventBus):
        bus.subscribe(Events.COMMAND, self.on_command)
        bus.subscribe(Events.MODE_CHANGED, self.on_mode_changed)
        return self

    def on_command(self, source=None, command=None, **kwargs):
        if command == self._last_command:
            self._repeat += 1
            return
        if self._last_command is not None and self._repeat:
            self.logger.debug("Command %s repeated %d times", self._last_command, self._repeat)
        self._last_command = command
        self._repeat = 0
        self._history.append({"timestamp": time.time(), "source": source, "command": command})
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]
        self.logger.info("Command: %-14s | Source: %s", command, source)

    def on_mode_changed(self, mode=None, reason=None, **kwargs):
        self._last_command = None
        self._repeat = 0
        self.logger.info("Mode: %-10s | Reason: %s", str(mode).upper(), reason)

    def get_history(self, last_n=None):
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def total_commands(self):
        return len(self._history)


def log_timing(func):
    """Decorator to log function execution time."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
