"""
=============================================================================
HANDLERS MODULE
=============================================================================

One handler per route kind. Each is a callable object:

    handler(conn, target) -> ResponseOutcome

    ┌──────────────────────┬───────────────────────┬──────────────────────┐
    │ Route                │ Handler               │ Outcomes             │
    ├──────────────────────┼───────────────────────┼──────────────────────┤
    │ /stats               │ StatsHandler          │ 200                  │
    │ /sync                │ SyncListHandler       │ 200, 500             │
    │ /sync/<name>         │ SyncDownloadHandler   │ 200, 404             │
    │ GET <anything else>  │ StaticFileHandler     │ 200, 404             │
    │ rejected             │ RejectHandler         │ 404                  │
    └──────────────────────┴───────────────────────┴──────────────────────┘

Handlers write straight to the connection so that files can be streamed
in chunks instead of being loaded into memory first.

=============================================================================
"""

from .base import FileHandler, RejectHandler
from .static import StaticFileHandler
from .stats import StatsHandler
from .sync import SyncListHandler, SyncDownloadHandler

__all__ = [
    "FileHandler",
    "RejectHandler",
    "StaticFileHandler",
    "StatsHandler",
    "SyncListHandler",
    "SyncDownloadHandler",
]
