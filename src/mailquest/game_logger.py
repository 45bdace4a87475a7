"""Structured game event logging.

The engine never imports a concrete logger. Every component receives an
object satisfying the GameLogger protocol; the default implementation
forwards to the standard logging module.

Usage:
    from mailquest.game_logger import LoggingGameLogger

    game_logger = LoggingGameLogger()
    game_logger.event("tech_purchase_success", team="Alpha", cost=100)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol


class GameLogger(Protocol):
    """Interface the engine logs through."""

    def event(self, name: str, **payload: Any) -> None: ...

    def info(self, message: str, **context: Any) -> None: ...

    def warning(self, message: str, **context: Any) -> None: ...

    def error(self, message: str, **context: Any) -> None: ...


class LoggingGameLogger:
    """GameLogger backed by stdlib logging.

    Events are emitted at INFO level on the ``mailquest.events`` logger with
    the payload attached under ``extra["payload"]`` so handlers can render it
    as structured data.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("mailquest.events")

    def event(self, name: str, **payload: Any) -> None:
        self._logger.info(f"event={name} {_format(payload)}", extra={"event": name, "payload": payload})

    def info(self, message: str, **context: Any) -> None:
        self._logger.info(f"{message} {_format(context)}".rstrip(), extra={"payload": context})

    def warning(self, message: str, **context: Any) -> None:
        self._logger.warning(f"{message} {_format(context)}".rstrip(), extra={"payload": context})

    def error(self, message: str, **context: Any) -> None:
        self._logger.error(f"{message} {_format(context)}".rstrip(), extra={"payload": context})


@dataclass
class LogRecord:
    """A single captured call on a RecordingGameLogger."""

    level: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)


class RecordingGameLogger:
    """GameLogger that keeps every call in memory.

    Useful in tests and for replaying what the engine reported during a
    round.
    """

    def __init__(self) -> None:
        self.records: list[LogRecord] = []

    def event(self, name: str, **payload: Any) -> None:
        self.records.append(LogRecord("event", name, payload))

    def info(self, message: str, **context: Any) -> None:
        self.records.append(LogRecord("info", message, context))

    def warning(self, message: str, **context: Any) -> None:
        self.records.append(LogRecord("warning", message, context))

    def error(self, message: str, **context: Any) -> None:
        self.records.append(LogRecord("error", message, context))

    def events(self, name: str) -> list[dict[str, Any]]:
        """Payloads of all events with the given name, in emission order."""
        return [r.payload for r in self.records if r.level == "event" and r.name == name]

    def by_level(self, level: str) -> list[LogRecord]:
        return [r for r in self.records if r.level == level]


def _format(payload: dict[str, Any]) -> str:
    return " ".join(f"{key}={value!r}" for key, value in payload.items())
