"""
=============================================================================
PROCESS-WIDE STATISTICS REGISTRY
=============================================================================

The registry is the ONLY mutable state shared between connection workers.
Every worker holds a reference to the same instance.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         StatsRegistry                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │   active_connections      +1 when a worker starts, -1 when it ends │
    │   total_requests          +1 per accepted connection (never -1)    │
    │   bytes_received          request bytes read by workers            │
    │   bytes_transmitted       file body bytes streamed to clients      │
    │   response_class_counts   {"2xx": n, "4xx": n, "5xx": n}           │
    │                                                                     │
    │   _lock ──── guards ALL of the above                               │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ONE LOCK, ONE CRITICAL SECTION PER LOGICAL UPDATE
=============================================================================

"+= 1" on a Python int is read-modify-write. Two threads can both read 5
and both write 6:

    Thread A: read 5 ─────────────── write 6
    Thread B:        read 5 ── write 6            (one increment lost)

So every update takes the lock. Compound updates (opening a connection
bumps two counters; a byte update may touch two) run inside ONE `with
self._lock:` block, never two. Otherwise a reader could see
total_requests already incremented but active_connections not yet.

snapshot() copies every field under the same lock, so the diagnostics
page only ever shows a combination of counters that actually existed.

=============================================================================
"""

import threading
from dataclasses import dataclass, field
from typing import Dict

from ..http.status_codes import RESPONSE_CLASSES, ResponseOutcome


@dataclass(frozen=True)
class StatsSnapshot:
    """Immutable copy of every counter, taken in one critical section."""

    active_connections: int = 0
    total_requests: int = 0
    bytes_received: int = 0
    bytes_transmitted: int = 0
    response_class_counts: Dict[str, int] = field(
        default_factory=lambda: {name: 0 for name in RESPONSE_CLASSES}
    )

    def count(self, response_class: str) -> int:
        """Counter for "2xx", "4xx" or "5xx"."""
        return self.response_class_counts.get(response_class, 0)


def format_uptime(seconds: float) -> str:
    """
    Render an uptime as "D days, HH:MM:SS".

        >>> format_uptime(90061)
        '1 days, 01:01:01'
    """
    total = max(int(seconds), 0)
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d}"


class StatsRegistry:
    """
    Thread-safe counters for the whole server process.

    Usage:
        stats = StatsRegistry()

        stats.connection_opened()          # worker start
        stats.record_bytes(received=42)
        stats.record_outcome(ResponseOutcome.OK)
        stats.connection_closed()          # worker end

        snap = stats.snapshot()
        snap.total_requests                # 1
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active_connections = 0
        self._total_requests = 0
        self._bytes_received = 0
        self._bytes_transmitted = 0
        self._response_class_counts: Dict[str, int] = {
            name: 0 for name in RESPONSE_CLASSES
        }

    def connection_opened(self) -> None:
        """Count a new connection as both active and a served request."""
        with self._lock:
            self._active_connections += 1
            self._total_requests += 1

    def connection_closed(self) -> None:
        """
        Release one active connection.

        Raises:
            RuntimeError: If no connection is active. That means a worker
                          closed twice, which would corrupt the counter.
        """
        with self._lock:
            if self._active_connections == 0:
                raise RuntimeError("connection_closed() without a matching connection_opened()")
            self._active_connections -= 1

    def record_bytes(self, received: int = 0, transmitted: int = 0) -> None:
        """Add to both byte counters in one update."""
        if received < 0 or transmitted < 0:
            raise ValueError("Byte counts cannot be negative")
        with self._lock:
            self._bytes_received += received
            self._bytes_transmitted += transmitted

    def record_outcome(self, outcome: ResponseOutcome) -> None:
        """Increment the response-class counter matching the outcome."""
        with self._lock:
            self._response_class_counts[outcome.response_class] += 1

    def snapshot(self) -> StatsSnapshot:
        """Copy every counter under the lock."""
        with self._lock:
            return StatsSnapshot(
                active_connections=self._active_connections,
                total_requests=self._total_requests,
                bytes_received=self._bytes_received,
                bytes_transmitted=self._bytes_transmitted,
                response_class_counts=dict(self._response_class_counts),
            )

    @property
    def active_connections(self) -> int:
        with self._lock:
            return self._active_connections
