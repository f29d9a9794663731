"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Fallback for every GET that is not a virtual endpoint:

    GET /index.html     ──►  <doc_root>/index.html
    GET /               ──►  <doc_root>/index.html   (aliased by the worker)
    GET /docs/a.html    ──►  <doc_root>/docs/a.html

Every file is sent as ``text/html``, whatever its extension. There is no
MIME detection, no directory index beyond "/" and no caching headers.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /../../../etc/passwd

Resolution goes through DocumentRoot.resolve_path(). With confinement on
(ServerConfig.confine_to_root, the default) a path that resolves outside
the document root is answered with the usual 404, indistinguishable from
a missing file.

=============================================================================
"""

from pathlib import Path

from .base import FileHandler
from ..http.response import HTML


class StaticFileHandler(FileHandler):
    """Serve ``<doc_root><path>`` as text/html."""

    content_type = HTML

    def resolve(self, target: str) -> Path:
        return self.docs.resolve_path(target)
