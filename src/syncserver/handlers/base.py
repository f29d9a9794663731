"""
=============================================================================
HANDLER BUILDING BLOCKS
=============================================================================

Every handler has the same shape:

    handler(conn, target) -> ResponseOutcome

It writes a complete response to the connection (status line, one header,
optional body) and returns exactly ONE outcome. The worker records that
outcome in the stats registry, so a handler can never count a response
twice or forget to count it.

=============================================================================
STREAMING FILES
=============================================================================

FileHandler is shared by /sync/<name> downloads and static pages. It
differs per subclass only in how a target is resolved and which
Content-Type is sent:

    ┌─────────────────────────────────────────────────────────────────┐
    │   resolve(target) ──► open_file() ──► FileUnavailable? ──► 404  │
    │                             │                                    │
    │                             ▼                                    │
    │                  send "200 OK" head                              │
    │                             │                                    │
    │                             ▼                                    │
    │        read chunk ──► send chunk ──► bytes_transmitted += len    │
    │             ▲                              │                     │
    │             └──────────────────────────────┘  until EOF          │
    └─────────────────────────────────────────────────────────────────┘

Once the 200 head is on the wire the outcome is fixed. A client that
disconnects mid-download stops the stream but the response still counts
as 2xx.

=============================================================================
"""

import logging
from pathlib import Path
from typing import BinaryIO

from ..core.stats import StatsRegistry
from ..filesystem import DocumentRoot, FileUnavailable
from ..http.response import HTTPResponse, not_found
from ..http.status_codes import HTTPStatus, ResponseOutcome


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serve one file from the document root as a streamed 200 response.

    Subclasses set ``content_type`` and implement ``resolve()``.
    """

    content_type = "application/octet-stream"

    def __init__(self, docs: DocumentRoot, stats: StatsRegistry, chunk_size: int = 1024):
        self.docs = docs
        self.stats = stats
        self.chunk_size = chunk_size

    def resolve(self, target: str) -> Path:
        raise NotImplementedError

    def __call__(self, conn, target: str) -> ResponseOutcome:
        try:
            fileobj = self.docs.open_file(self.resolve(target))
        except FileUnavailable as e:
            logger.debug(f"[{conn.id}] {target!r} unavailable: {e}")
            conn.send(not_found().to_bytes())
            return ResponseOutcome.NOT_FOUND

        with fileobj:
            if conn.send(HTTPResponse(HTTPStatus.OK, self.content_type).head_bytes()):
                self._stream(conn, fileobj)
        return ResponseOutcome.OK

    def _stream(self, conn, fileobj: BinaryIO) -> None:
        while True:
            try:
                chunk = fileobj.read(self.chunk_size)
            except OSError as e:
                logger.error(f"[{conn.id}] Read failed mid-stream: {e}")
                return

            if not chunk:
                return

            if not conn.send(chunk):
                return  # Client went away
            self.stats.record_bytes(transmitted=len(chunk))


class RejectHandler:
    """Answer 404 without touching the filesystem."""

    def __call__(self, conn, target: str = "") -> ResponseOutcome:
        conn.send(not_found().to_bytes())
        return ResponseOutcome.NOT_FOUND
