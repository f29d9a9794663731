"""
=============================================================================
SYNC HANDLERS
=============================================================================

Two virtual endpoints let a client mirror the document root:

    GET /sync           plain-text list of the files, one name per line
    GET /sync/<name>    raw bytes of <doc_root>/<name>

A sync client first fetches the listing, then downloads each name.

    $ curl http://localhost:8080/sync
    a.txt
    b.txt
    $ curl -o a.txt http://localhost:8080/sync/a.txt

The listing covers regular files directly under the root: no
subdirectories, no symlinks, no recursion. Downloads accept only a bare
file name, so /sync/sub/file.txt is a 404.

=============================================================================
"""

import logging
import os
from pathlib import Path

from .base import FileHandler
from ..filesystem import DocumentRoot, DirectoryUnreadable
from ..http.response import OCTET_STREAM, ok, internal_error
from ..http.status_codes import ResponseOutcome


logger = logging.getLogger(__name__)


class SyncListHandler:
    """
    GET /sync: list the regular files in the document root.

    Returns 500 with an empty body if the root cannot be read.
    """

    def __init__(self, docs: DocumentRoot):
        self.docs = docs

    def __call__(self, conn, target: str = "") -> ResponseOutcome:
        try:
            names = self.docs.list_files()
        except DirectoryUnreadable as e:
            logger.error(f"[{conn.id}] {e}")
            conn.send(internal_error().to_bytes())
            return ResponseOutcome.SERVER_ERROR

        if conn.send(ok().head_bytes()):
            for name in names:
                if not conn.send(os.fsencode(name) + b"\n"):
                    break
        return ResponseOutcome.OK


class SyncDownloadHandler(FileHandler):
    """GET /sync/<name>: stream one file as application/octet-stream."""

    content_type = OCTET_STREAM

    def resolve(self, target: str) -> Path:
        return self.docs.resolve_named(target)
