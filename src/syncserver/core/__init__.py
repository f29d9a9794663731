"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The concurrency engine of the sync server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds the listening socket (backlog = admission control)          │
    │  • Runs the accept() loop in the calling thread                      │
    │  • Closes the listener on SIGINT/SIGTERM                             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ one Connection per accept()
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Owned by exactly one worker thread                                │
    │  • One recv(), any number of sends, one close()                      │
    │  • ACCEPTED → PARSED → ROUTED → HANDLED → CLOSED                     │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ workers only meet here
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                        STATS REGISTRY                                │
    │  • The only shared mutable state                                     │
    │  • One lock, one critical section per logical update                 │
    └─────────────────────────────────────────────────────────────────────┘

THREAD-PER-CONNECTION, UNBOUNDED
    Every accepted connection gets its own OS thread. There is no pool and
    no limit: under a flood of slow clients the thread count grows with
    them until the kernel backlog fills. This is the scalability ceiling
    of the design.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, InvalidTransition
from .stats import StatsRegistry, StatsSnapshot, format_uptime

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "InvalidTransition",
    "StatsRegistry",
    "StatsSnapshot",
    "format_uptime",
]
