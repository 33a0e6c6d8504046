"""Structured JSON logging for signup request decisions."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

_LOGGER_NAME = "signup_endpoint"


@dataclass(frozen=True)
class LogContext:
    """Per-request identifiers attached to every event."""

    request_id: str | None = None
    client_key: str | None = None

    def as_fields(self) -> dict[str, str]:
        fields: dict[str, str] = {}
        if self.request_id:
            fields["request_id"] = self.request_id
        if self.client_key:
            fields["client_key"] = self.client_key
        return fields


class StructuredLogger:
    """One JSON line per event, keyed by ``event`` name."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(_LOGGER_NAME)
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
        self._logger.setLevel(logging.INFO)

    def info(self, event: str, *, context: LogContext | None = None, **fields: Any) -> None:
        self._emit(logging.INFO, event, context, fields)

    def error(self, event: str, *, context: LogContext | None = None, **fields: Any) -> None:
        self._emit(logging.ERROR, event, context, fields)

    def _emit(
        self,
        level: int,
        event: str,
        context: LogContext | None,
        fields: dict[str, Any],
    ) -> None:
        record: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": logging.getLevelName(level).lower(),
            "event": event,
            **(context.as_fields() if context is not None else {}),
            **fields,
        }
        self._logger.log(level, json.dumps(record, sort_keys=True, default=str))


_default_logger: StructuredLogger | None = None


def get_logger() -> StructuredLogger:
    global _default_logger
    if _default_logger is None:
        _default_logger = StructuredLogger()
    return _default_logger
