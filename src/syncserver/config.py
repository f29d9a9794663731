"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the sync server.

The core treats all of these as fixed inputs: they are read once when
SyncServer is constructed and never change while it runs.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m syncserver --port 3000                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── SYNCSERVER_PORT=3000 python -m syncserver                 │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    └─────────────────────────────────────────────────────────────────────┘

The defaults reproduce the classic deployment of this server: port 8080
on all interfaces, a backlog of 5, a 1 KB request buffer and ./www as
the document root.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip().lower() in ("", "none"):
        return None
    return float(value)


@dataclass
class ServerConfig:
    """
    Configuration for the sync server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK        host, port, backlog, accept_timeout
    CONNECTION     buffer_size, chunk_size, timeout
    FILES          doc_root, confine_to_root
    LOGGING        log_level, log_format
    PROCESS        install_signal_handlers, server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 8080
    """Port to listen on. 0 asks the OS for a free port (tests use this)."""

    backlog: int = 5
    """
    listen() backlog: connections the kernel queues before refusing.
    This is the ONLY admission control the server has.
    """

    accept_timeout: float = 1.0
    """
    Poll interval of the accept loop in seconds. accept() wakes up this
    often to notice a shutdown request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONNECTION SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 1024
    """
    Size of the single recv() per connection, which is also the maximum
    request-line size. Longer requests are truncated.
    """

    chunk_size: int = 1024
    """Bytes read from a file and sent per write while streaming."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block indefinitely on a slow client (the classic behavior).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    doc_root: str = "./www"
    """Directory that /sync, /sync/<name> and static paths resolve under."""

    confine_to_root: bool = True
    """
    Answer 404 for paths that resolve outside doc_root (../ traversal,
    symlinks pointing out). False restores plain concatenation of
    doc_root + path with no check.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-like) or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # PROCESS
    # ─────────────────────────────────────────────────────────────────────

    install_signal_handlers: bool = True
    """
    Catch SIGINT/SIGTERM to close the listener. Only possible from the
    main thread; ignored elsewhere.
    """

    server_name: str = "SyncServer/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        SYNCSERVER_HOST        Bind address (default: 0.0.0.0)
        SYNCSERVER_PORT        Port (default: 8080)
        SYNCSERVER_BACKLOG     listen() backlog (default: 5)
        SYNCSERVER_DOC_ROOT    Document root (default: ./www)
        SYNCSERVER_TIMEOUT     Connection timeout, "none" to disable
        SYNCSERVER_LOG_LEVEL   Logging level (default: INFO)
        SYNCSERVER_LOG_FORMAT  text or json (default: text)
        """
        return cls(
            host=os.getenv("SYNCSERVER_HOST", "0.0.0.0"),
            port=int(os.getenv("SYNCSERVER_PORT", "8080")),
            backlog=int(os.getenv("SYNCSERVER_BACKLOG", "5")),
            doc_root=os.getenv("SYNCSERVER_DOC_ROOT", "./www"),
            timeout=_optional_float(os.getenv("SYNCSERVER_TIMEOUT")),
            log_level=os.getenv("SYNCSERVER_LOG_LEVEL", "INFO"),
            log_format=os.getenv("SYNCSERVER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values (fail fast, at startup).

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 16:
            raise ValueError("buffer_size must be >= 16")

        if self.chunk_size < 16:
            raise ValueError("chunk_size must be >= 16")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0 or None")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
