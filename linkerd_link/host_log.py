"""Per-resource log attribution.

Output relayed from the external tools is delivered to the orchestration
host's log sink, tagged with a severity and the URN of the resource whose
operation produced it, so that operators see progress next to the right
resource while long operations run.
"""

from enum import Enum
from typing import Protocol

import structlog


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"


class HostLogSink(Protocol):
    """Anything that can deliver an attributed log line to the host."""

    def log(self, severity: Severity, urn: str, message: str) -> None: ...


class StructlogHostSink:
    """Default sink: emits attributed lines through structlog."""

    def __init__(self, logger_name: str = "linkerd_link.host"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, severity: Severity, urn: str, message: str) -> None:
        bound = self._logger.bind(urn=urn)
        if severity is Severity.WARNING:
            bound.warning(message)
        else:
            bound.info(message)


class ResourceLog:
    """Log handle bound to one resource instance, handed to the pipeline."""

    def __init__(self, sink: HostLogSink, urn: str):
        self.sink = sink
        self.urn = urn

    def _emit(self, severity: Severity, line: str) -> None:
        line = line.rstrip("\r\n")
        if not line.strip():
            return
        self.sink.log(severity, self.urn, line)

    def info(self, line: str) -> None:
        self._emit(Severity.INFO, line)

    def warning(self, line: str) -> None:
        self._emit(Severity.WARNING, line)


__all__ = ["HostLogSink", "ResourceLog", "Severity", "StructlogHostSink"]
