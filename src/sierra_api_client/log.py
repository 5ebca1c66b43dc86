"""Level-filtered structured logging to stderr.

:class:`ClientLogger` accepts a level, a message and keyword metadata on
every call and renders one line per record in one of two formats:

* ``json`` -- a JSON object per line (``level``, ``message``,
  ``timestamp`` plus the metadata). Suitable for log shippers.
* ``plain`` -- ``LEVEL message {metadata}``, coloured through a Rich
  :class:`~rich.console.Console` unless colour is disabled.

Colour follows the ``NO_COLOR`` / ``TERM=dumb`` conventions.
"""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from sierra_api_client.models import LOG_LEVELS


class LogFormat(str, Enum):
    """Supported record formats."""

    JSON = "json"
    PLAIN = "plain"


_LEVEL_STYLES = {
    "debug": "dim",
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
}


class ClientLogger:
    """Structured logger with level filtering.

    Records below ``level`` are dropped. Metadata values that are not JSON
    serialisable are rendered with ``str()``.

    Args:
        level: Minimum level to emit (``debug``, ``info``, ``warning`` or
            ``error``).
        format: Record format.
        stream: Destination stream. Defaults to ``sys.stderr``.
        no_color: Disable Rich colour in ``plain`` format.
    """

    def __init__(
        self,
        level: str = "info",
        format: LogFormat = LogFormat.JSON,
        stream: Optional[TextIO] = None,
        no_color: bool = False,
    ) -> None:
        level = level.lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level!r}")
        self._level = level
        self._threshold = LOG_LEVELS.index(level)
        self._format = LogFormat(format)
        self._stream = stream if stream is not None else sys.stderr
        self._no_color = no_color or _should_disable_color()
        self._console = Console(
            file=self._stream,
            no_color=self._no_color,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def level(self) -> str:
        """The minimum level emitted."""
        return self._level

    def is_enabled_for(self, level: str) -> bool:
        """Whether a record at *level* would be emitted."""
        return LOG_LEVELS.index(level) >= self._threshold

    def log(self, level: str, message: str, **metadata: Any) -> None:
        """Emit a record at *level* if it passes the threshold."""
        if not self.is_enabled_for(level):
            return
        if self._format == LogFormat.JSON:
            # Record fields applied after metadata so they cannot be shadowed.
            record: dict[str, Any] = dict(metadata)
            record["level"] = level.upper()
            record["message"] = message
            record["timestamp"] = datetime.now(timezone.utc).isoformat()
            print(json.dumps(record, default=str), file=self._stream, flush=True)
            return

        line = f"{level.upper():<7} {message}"
        if metadata:
            line = f"{line} {json.dumps(metadata, default=str)}"
        if self._no_color:
            print(line, file=self._stream, flush=True)
        else:
            self._console.print(f"[{_LEVEL_STYLES[level]}]{escape(line)}[/]")

    def debug(self, message: str, **metadata: Any) -> None:
        self.log("debug", message, **metadata)

    def info(self, message: str, **metadata: Any) -> None:
        self.log("info", message, **metadata)

    def warning(self, message: str, **metadata: Any) -> None:
        self.log("warning", message, **metadata)

    def error(self, message: str, **metadata: Any) -> None:
        self.log("error", message, **metadata)


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False
