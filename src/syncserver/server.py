"""
=============================================================================
SYNC SERVER
=============================================================================

The orchestrator: it owns the process-wide ServerState and runs one
Connection Worker per accepted connection.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SyncServer                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ServerState ─┬─ SocketServer   (listening socket, accept loop)     │
    │                ├─ StatsRegistry  (shared counters)                   │
    │                └─ start_time     (for uptime)                        │
    │                                                                      │
    │   Router ──────┬─ /stats         StatsHandler                        │
    │                ├─ /sync          SyncListHandler                     │
    │                ├─ /sync/<name>   SyncDownloadHandler                 │
    │                ├─ GET <path>     StaticFileHandler                   │
    │                └─ rejected       RejectHandler                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONNECTION WORKER LIFECYCLE
=============================================================================

Each accepted connection gets a fresh daemon thread running
_process_connection(). The accept loop never waits for it.

    1. stats.connection_opened()     active +1, total +1 (one update)
    2. conn.receive()                ONE recv of up to buffer_size bytes
       stats.record_bytes(received)
    3. parse method + path           malformed ──► REJECTED
    4. "/" ──► "/index.html"
    5. route + handler               writes the response, returns outcome
       stats.record_outcome()        exactly once
    6. stats.connection_closed()     active -1
    7. conn.close()                  always, no keep-alive

Steps 6 and 7 run in a ``finally`` block, so a worker that hits an
unexpected error still releases its active-connection slot exactly once.
Step 6 happens BEFORE the close: by the time a client sees end-of-file,
every counter this connection touched is already final.

Workers never talk to each other. The only state they share is the
StatsRegistry.

=============================================================================
"""

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .access_log import AccessLogger
from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer, StatsRegistry
from .filesystem import DocumentRoot
from .handlers import (
    RejectHandler,
    StaticFileHandler,
    StatsHandler,
    SyncDownloadHandler,
    SyncListHandler,
)
from .http import (
    RequestParser,
    RequestParseError,
    ResponseOutcome,
    RouteDecision,
    RouteKind,
    Router,
    internal_error,
    normalize_path,
)


logger = logging.getLogger(__name__)


@dataclass
class ServerState:
    """
    Process-wide state: exactly one per running server.

    Attributes:
        socket_server: Owner of the listening socket. Shared only so the
                       signal handler can close it.
        stats: Counters shared by every worker.
        start_time: When the server started, for the uptime line.
    """

    socket_server: SocketServer
    stats: StatsRegistry = field(default_factory=StatsRegistry)
    start_time: float = field(default_factory=time.time)


class SyncServer:
    """
    Concurrent HTTP server for syncing a document root.

    Usage:
        server = SyncServer(ServerConfig(port=8080, doc_root="./www"))
        server.run()   # Blocks until SIGINT/SIGTERM

    From another thread (tests):
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_ready(5.0)
        host, port = server.address
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self.state = ServerState(socket_server=SocketServer(self.config))

        self._parser = RequestParser(max_request_size=self.config.buffer_size)
        self._access_log = AccessLogger(log_format=self.config.log_format)

        docs = DocumentRoot(self.config.doc_root, confine=self.config.confine_to_root)
        self.docs = docs

        self._stats_handler = StatsHandler(self.stats, self.state.start_time)
        self._router = (Router()
            .register(RouteKind.DIAGNOSTICS, self._stats_handler)
            .register(RouteKind.LIST_DIRECTORY, SyncListHandler(docs))
            .register(RouteKind.DOWNLOAD_NAMED,
                      SyncDownloadHandler(docs, self.stats, self.config.chunk_size))
            .register(RouteKind.SERVE_STATIC,
                      StaticFileHandler(docs, self.stats, self.config.chunk_size))
            .register(RouteKind.REJECTED, RejectHandler()))

        self._running = False

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def stats(self) -> StatsRegistry:
        return self.state.stats

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening on port 0."""
        return self.state.socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket cannot be bound. Nothing has
                     been served at that point.
        """
        self._setup_logging()

        # Counters and uptime start from zero at startup
        self.state.start_time = time.time()
        self._stats_handler.start_time = self.state.start_time

        logger.info(f"{self.config.server_name} serving {self.docs.root}")

        self._running = True
        try:
            self.state.socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info(
                f"Server stopped, {self.stats.active_connections} connection(s) still in flight"
            )

    def shutdown(self):
        """Stop accepting connections. In-flight workers are not waited for."""
        self.state.socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the listening socket is up. Returns False on timeout."""
        return self.state.socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("syncserver").setLevel(level)

    # =========================================================================
    # CONNECTION WORKERS
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for a new connection (fire and forget).

        Called from the accept loop, so it must return immediately.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"worker-{conn.id}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as e:
            # Thread limit reached: answer 500 inline, keep accepting
            logger.error(f"[{conn.id}] Could not start worker: {e}")
            self._refuse_connection(conn)

    def _refuse_connection(self, conn: Connection):
        """Count and answer a connection no worker could take (accept thread)."""
        self.stats.connection_opened()
        try:
            conn.send(internal_error().to_bytes())
            self.stats.record_outcome(ResponseOutcome.SERVER_ERROR)
        finally:
            try:
                self.stats.connection_closed()
            finally:
                conn.close()

    def _process_connection(self, conn: Connection):
        """Serve one connection start to finish (runs in the worker thread)."""
        self.stats.connection_opened()

        method = path = ""
        outcome: Optional[ResponseOutcome] = None

        try:
            raw = conn.receive()
            self.stats.record_bytes(received=len(raw))

            try:
                request = self._parser.parse(raw, conn.address)
            except RequestParseError as e:
                logger.debug(f"[{conn.id}] Malformed request: {e}")
                request = None
            else:
                request = replace(request, path=normalize_path(request.path))
                method, path = request.method, request.path
            conn.advance(ConnectionState.PARSED)

            decision = self._router.match(request)
            conn.advance(ConnectionState.ROUTED)

            outcome = self._dispatch(conn, decision)
            conn.advance(ConnectionState.HANDLED)
        finally:
            try:
                self.stats.connection_closed()
            finally:
                conn.close()

        self._access_log.log(conn, method, path, outcome.status)

    def _dispatch(self, conn: Connection, decision: RouteDecision) -> ResponseOutcome:
        """
        Run the handler and record its outcome, exactly once.

        A handler bug becomes a 500 for this client only; it never
        escapes the worker.
        """
        try:
            outcome = self._router.dispatch(decision, conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error for {decision.kind.value}: {e}")
            # Once a head is out, a second status line would land in the body
            if conn.bytes_sent == 0:
                conn.send(internal_error().to_bytes())
            outcome = ResponseOutcome.SERVER_ERROR

        self.stats.record_outcome(outcome)
        return outcome


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# Accept → spawn worker → receive → parse → route → handle → record → close
#
# KNOWN LIMITS (kept on purpose, see the config for the knobs):
# - One thread per connection, no upper bound
# - No per-connection timeout unless ServerConfig.timeout is set
# - Requests longer than buffer_size are truncated
# - Shutdown does not drain in-flight workers
# - If no worker thread can start, the accept thread itself answers 500
# =============================================================================
