"""
Log Events
==========
Structured progress/success/error events produced by the ingestion pipeline.

Why is this file needed?
------------------------
1. The pipeline only *produces* events. Whoever displays them (the log panel,
   a toast, a test) implements the `LogSink` protocol.
2. `LogBook` is the in-process sink: append-only, and it mirrors every event
   to the standard `logging` tree so console/file logs see the same story.

Classes:
    LogLevel: Severity of an event (INFO, SUCCESS, WARNING, ERROR).
    LogEvent: One immutable event.
    LogBook: Append-only sink keeping events in memory.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Callable, List, Protocol

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%m/%d/%Y, %H:%M:%S"


class LogLevel(StrEnum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


# SUCCESS has no counterpart in the logging module
_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEvent:
    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        """Render as '[MM/DD/YYYY, HH:MM:SS] [LEVEL] message'."""
        return f"[{self.timestamp.strftime(TIMESTAMP_FORMAT)}] [{self.level.value}] {self.message}"

    @property
    def python_level(self) -> int:
        return _PY_LEVELS[self.level]


class LogSink(Protocol):
    def emit(self, event: LogEvent) -> None: ...


class LogBook:
    """Append-only sink. Listeners are notified after each append."""

    def __init__(self) -> None:
        self._events: List[LogEvent] = []
        self._listeners: List[Callable[[LogEvent], None]] = []

    def emit(self, event: LogEvent) -> None:
        self._events.append(event)
        logger.log(event.python_level, "[%s] %s", event.level.value, event.message)
        for listener in self._listeners:
            listener(event)

    def subscribe(self, listener: Callable[[LogEvent], None]) -> None:
        self._listeners.append(listener)

    @property
    def events(self) -> tuple[LogEvent, ...]:
        return tuple(self._events)

    def of_level(self, level: LogLevel) -> list[LogEvent]:
        return [e for e in self._events if e.level is level]

    def __len__(self) -> int:
        return len(self._events)


def emit(sink: LogSink, level: LogLevel, message: str) -> LogEvent:
    """Build an event and hand it to `sink`. Returns the event."""
    event = LogEvent(level=level, message=message)
    sink.emit(event)
    return event
