"""
=============================================================================
SYNCSERVER - Concurrent File Sync Server Over Raw Sockets
=============================================================================

A small HTTP server that publishes one directory so that clients can list
and download its files, with a live page of server statistics.

=============================================================================
ENDPOINTS
=============================================================================

    GET /stats           Plain-text counters (connections, bytes, outcomes)
    GET /sync            Names of the regular files in the document root
    GET /sync/<name>     Download one of those files
    GET <path>           Static file under the document root ("/" = index)

Anything else (other methods, malformed request lines) gets a 404.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    syncserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m syncserver)
    ├── server.py            # SyncServer + connection workers
    ├── config.py            # ServerConfig dataclass
    ├── filesystem.py        # DocumentRoot (open, list, confinement)
    ├── access_log.py        # One access line per connection
    ├── core/                # Low-level components
    │   ├── socket_server.py # Listening socket + accept loop
    │   ├── connection.py    # Connection wrapper + lifecycle states
    │   └── stats.py         # StatsRegistry (the shared counters)
    ├── http/                # HTTP protocol components
    │   ├── request.py       # Request-line parsing
    │   ├── response.py      # Status line + Content-Type + body
    │   ├── router.py        # Path ──► RouteKind
    │   └── status_codes.py  # Status enums + response outcomes
    └── handlers/            # One handler per route kind
        ├── base.py          # Chunked file streaming, rejection
        ├── static.py        # GET <path>
        ├── sync.py          # /sync and /sync/<name>
        └── stats.py         # /stats

=============================================================================
QUICK START
=============================================================================

    from syncserver import SyncServer, ServerConfig

    server = SyncServer(ServerConfig(port=8080, doc_root="./www"))
    server.run()

    $ curl http://localhost:8080/sync
    $ curl -O http://localhost:8080/sync/report.pdf
    $ curl http://localhost:8080/stats

=============================================================================
"""

__version__ = "1.0.0"

from .server import SyncServer
from .config import ServerConfig

__all__ = ["SyncServer", "ServerConfig", "__version__"]
