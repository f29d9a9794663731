"""
=============================================================================
DIAGNOSTICS HANDLER
=============================================================================

GET /stats shows the process-wide counters as plain text:

    HTTP/1.1 200 OK
    Content-Type: text/plain

    Active connections: 3
    Total requests served: 1204
    Uptime: 0 days, 02:17:45
    Total bytes received: 98213
    Total bytes transmitted: 5520133
    HTTP 2xx responses: 1150
    HTTP 4xx responses: 53
    HTTP 5xx responses: 0

=============================================================================
WHAT THE NUMBERS MEAN
=============================================================================

- "Active connections" includes the /stats request itself, so it is
  never below 1 on this page.
- "Total requests served" counts every accepted connection, including
  malformed and rejected ones.
- "Total bytes transmitted" counts file bodies sent by /sync/<name> and
  static pages. Headers, listings and this page are not counted.
- This page counts itself as a 2xx AFTER the snapshot is taken, so the
  2xx line does not include the current request.

All values come from ONE StatsRegistry.snapshot() call. No combination
of counters shown here could not have existed at a single moment.

=============================================================================
"""

import time
from typing import Callable

from ..core.stats import StatsRegistry, StatsSnapshot, format_uptime
from ..http.response import ok
from ..http.status_codes import ResponseOutcome


class StatsHandler:
    """
    Render the stats registry for GET /stats.

    Args:
        stats: The shared registry.
        start_time: Server start timestamp (time.time() at startup).
        clock: Source of "now". Tests replace it to pin the uptime.
    """

    def __init__(
        self,
        stats: StatsRegistry,
        start_time: float,
        clock: Callable[[], float] = time.time,
    ):
        self.stats = stats
        self.start_time = start_time
        self.clock = clock

    def render(self, snapshot: StatsSnapshot, uptime: float) -> str:
        return (
            f"Active connections: {snapshot.active_connections}\n"
            f"Total requests served: {snapshot.total_requests}\n"
            f"Uptime: {format_uptime(uptime)}\n"
            f"Total bytes received: {snapshot.bytes_received}\n"
            f"Total bytes transmitted: {snapshot.bytes_transmitted}\n"
            f"HTTP 2xx responses: {snapshot.count('2xx')}\n"
            f"HTTP 4xx responses: {snapshot.count('4xx')}\n"
            f"HTTP 5xx responses: {snapshot.count('5xx')}\n"
        )

    def __call__(self, conn, target: str = "") -> ResponseOutcome:
        snapshot = self.stats.snapshot()
        body = self.render(snapshot, self.clock() - self.start_time)
        conn.send(ok(body).to_bytes())
        return ResponseOutcome.OK
