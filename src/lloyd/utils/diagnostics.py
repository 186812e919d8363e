"""
Diagnostic sinks for engine events.

The engine never writes logs on its own. A driver that wants to see what
happens passes a sink, any callable ``sink(event, payload)``, as the
``diagnostics`` argument. Events emitted by the engine:

- ``loaded``: n_points, stride
- ``initialized``: n_clusters, centers, degenerate_dimensions
- ``degenerate_dimension``: dimensions, values
- ``assigned``: moved_count, inertia
- ``empty_cluster``: clusters, policy
- ``recomputed``: cluster_sizes
- ``round``: round, moved_count, inertia (sent by ``run_until_stable``)
"""

from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple
import logging
import sys

from torch import Tensor

DiagnosticSink = Callable[[str, Dict[str, Any]], None]


def format_payload(payload: Dict[str, Any]) -> str:
    """Render a payload as ``key=value`` pairs."""
    parts = []
    for key, value in payload.items():
        if isinstance(value, Tensor):
            value = value.tolist()
        parts.append(f"{key}={value}")
    return " ".join(parts)


class LoggingSink:
    """Forward events to a standard library logger."""

    def __init__(self, logger: Optional[logging.Logger] = None,
                 level: int = logging.DEBUG):
        self.logger = logger if logger is not None else logging.getLogger('lloyd')
        self.level = level

    def __call__(self, event: str, payload: Dict[str, Any]) -> None:
        if self.logger.isEnabledFor(self.level):
            self.logger.log(self.level, "%s %s", event, format_payload(payload))


class StreamSink:
    """Write one line per event to a text stream (stderr by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def __call__(self, event: str, payload: Dict[str, Any]) -> None:
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(f"{event}: {format_payload(payload)}\n")
        stream.flush()


class RecordingSink:
    """Keep every event in memory, in the order received."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, dict(payload)))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def of(self, event: str) -> List[Dict[str, Any]]:
        """Payloads of all events with the given name."""
        return [payload for name, payload in self.events if name == event]

    def clear(self) -> None:
        self.events = []
