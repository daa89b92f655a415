from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

log = logging.getLogger("metaindex")

# A sink receives (level, message). Levels: debug, info, success, summary,
# warning, error. "summary" carries the end-of-run statistics.
LogSink = Callable[[str, str], None]

_LOGGING_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "summary": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def logging_sink(logger: Optional[logging.Logger] = None) -> LogSink:
    """Build a sink that forwards diagnostics to a stdlib logger."""

    target = logger or log

    def _emit(level: str, message: str) -> None:
        target.log(_LOGGING_LEVELS.get(level, logging.INFO), message)

    return _emit


@dataclass
class RecordingSink:
    """Sink that keeps every diagnostic in memory."""

    records: List[Tuple[str, str]] = field(default_factory=list)

    def __call__(self, level: str, message: str) -> None:
        self.records.append((level, message))

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [m for lv, m in self.records if level is None or lv == level]


class Diagnostics:
    """Verbosity-aware front for a LogSink.

    Debug messages are dropped unless ``verbose`` is set; every other level
    always reaches the sink.
    """

    def __init__(self, sink: Optional[LogSink] = None, *, verbose: bool = False) -> None:
        self._sink = sink or logging_sink()
        self.verbose = verbose

    def emit(self, message: str, level: str = "info") -> None:
        if level == "debug" and not self.verbose:
            return
        self._sink(level, message)

    def debug(self, message: str) -> None:
        self.emit(message, "debug")

    def info(self, message: str) -> None:
        self.emit(message, "info")

    def success(self, message: str) -> None:
        self.emit(message, "success")

    def summary(self, message: str) -> None:
        self.emit(message, "summary")

    def warning(self, message: str) -> None:
        self.emit(message, "warning")

    def error(self, message: str) -> None:
        self.emit(message, "error")
