# rakhimart/core/diagnostics.py
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger("rakhimart.diagnostics")

Sink = Callable[[str, Dict[str, Any]], None]


class Diagnostics:
    """
    Fire-and-forget anomaly reporter (malformed persisted cart, rejected mutations,
    storage failures). Always logs; forwards to an optional sink (metrics, Sentry, a list in tests).
    A failing sink never reaches the caller.
    """

    def __init__(self, sink: Optional[Sink] = None, level: int = logging.WARNING):
        self._sink = sink
        self._level = level

    def report(self, event: str, **fields: Any) -> None:
        logger.log(self._level, "%s %s", event, fields)
        if self._sink is None:
            return
        try:
            self._sink(event, fields)
        except Exception:
            logger.debug("diagnostics sink failed for %s", event, exc_info=True)


class RecordingDiagnostics(Diagnostics):
    """Keeps reported events in memory; handy for inspecting what the engine complained about."""

    def __init__(self):
        self.events: list[tuple[str, Dict[str, Any]]] = []
        super().__init__(sink=lambda event, fields: self.events.append((event, fields)))

    def names(self) -> list[str]:
        return [event for event, _ in self.events]
