"""
Engine activity counters, exportable as a dict or Prometheus text.
"""

from __future__ import annotations

import threading

PREFIX = "pm_engine_"

# Counters the engine increments, with their exposition help text.
COUNTERS: dict[str, str] = {
    "notifications_sent_total": "Notifications handed to the dispatcher.",
    "notifications_failed_total": "Notifications whose fan-out raised and was dropped.",
    "attachments_reconciled_total": "File links removed because the file left the project root.",
}


class MetricsCollector:
    """
    Counters shared by every engine a factory builds.

    Only the names in :data:`COUNTERS` are accepted, so a typo at a call
    site fails loudly instead of creating a stray series.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = dict.fromkeys(COUNTERS, 0)
        self._lock = threading.Lock()

    def inc(self, name: str, value: int = 1) -> None:
        if name not in self._counters:
            raise KeyError(f"Unknown counter: {name}")
        with self._lock:
            self._counters[name] += value

    def get(self, name: str) -> int:
        return self._counters[name]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def to_prometheus(self) -> str:
        lines = []
        for name, value in sorted(self.snapshot().items()):
            lines.append(f"# HELP {PREFIX}{name} {COUNTERS[name]}")
            lines.append(f"# TYPE {PREFIX}{name} counter")
            lines.append(f"{PREFIX}{name} {value}")
        return "\n".join(lines) + "\n"
