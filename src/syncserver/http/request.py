"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

The sync server looks at exactly ONE thing from the client: the first two
whitespace-delimited tokens of whatever arrived in a single recv().

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /sync/report.pdf HTTP/1.1\r\n                              │
    │  └─┘ └──────────────┘ └─────────────────────────────────┘       │
    │ method      path           ignored (version, headers, body)     │
    └─────────────────────────────────────────────────────────────────┘

There is no header parsing, no body and no query-string handling. A path
is taken verbatim, so "/index.html?x=1" looks for a file with that name.

Tokens are split on ASCII whitespace only. The path bytes are decoded
with os.fsdecode(), so a name printed by /sync can be sent back as-is:

    GET /sync/café.txt (UTF-8 on the wire)  ->  path "/sync/café.txt"

=============================================================================
TRUNCATION
=============================================================================

The worker reads at most ``buffer_size`` bytes (1024 by default) in one
call. Anything beyond that is never read. A request line longer than the
buffer is parsed from the truncated bytes, which usually gives a path that
does not exist and therefore a 404. This is the documented maximum
request-line size, not something the parser tries to recover from.

=============================================================================
MALFORMED INPUT
=============================================================================

    b""                      -> RequestParseError (empty request)
    b"GET"                   -> RequestParseError (no path)
    b"GET index.html ..."    -> RequestParseError (path must start with /)

A parse error carries a status code (404) so the worker can turn it into
the same rejection response the router uses for unroutable requests.

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .status_codes import HTTPStatus


DEFAULT_MAX_REQUEST_SIZE = 1024
INDEX_PATH = "/index.html"


class RequestParseError(Exception):
    """
    Raised when no usable method/path can be recovered.

    Attributes:
        status_code: Status the client should receive (404, the server
                     never answers 400).
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.NOT_FOUND):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class ParsedRequest:
    """
    The only request data the server models.

    Attributes:
        method: First token, e.g. "GET". Compared case-sensitively.
        path: Second token, always starting with "/".
        client_address: (ip, port) of the peer, for logging only.
    """

    method: str
    path: str
    client_address: Tuple[str, int] = field(default=("", 0), compare=False)

    @property
    def is_get(self) -> bool:
        return self.method == "GET"


class RequestParser:
    """
    Turns the raw bytes of one recv() into a ParsedRequest.

    Usage:
        parser = RequestParser(max_request_size=1024)
        request = parser.parse(b"GET /stats HTTP/1.1\\r\\n\\r\\n")
        request.path  # "/stats"
    """

    def __init__(self, max_request_size: int = DEFAULT_MAX_REQUEST_SIZE):
        self.max_request_size = max_request_size

    def parse(
        self,
        raw: bytes,
        client_address: Optional[Tuple[str, int]] = None,
    ) -> ParsedRequest:
        """
        Parse method and path from the first bytes of a request.

        Args:
            raw: Bytes received from the client (possibly empty).
            client_address: Peer address, attached to the result.

        Returns:
            ParsedRequest with the path exactly as sent.

        Raises:
            RequestParseError: If no method or no "/"-rooted path is present.
        """
        # bytes.split() only splits on ASCII whitespace, like "%s" in C
        tokens = raw[:self.max_request_size].split(None, 2)

        if not tokens:
            raise RequestParseError("Empty request")
        if len(tokens) < 2:
            raise RequestParseError(f"Missing request path after {tokens[0]!r}")

        # The path names a file on disk: fsdecode round-trips with os.fsencode,
        # which the /sync listing uses, even for bytes that are not UTF-8
        method = tokens[0].decode("latin-1")
        path = os.fsdecode(tokens[1])
        if not path.startswith("/"):
            raise RequestParseError(f"Malformed request path: {path!r}")

        return ParsedRequest(
            method=method,
            path=path,
            client_address=client_address or ("", 0),
        )


def normalize_path(path: str) -> str:
    """Alias the bare root to the index page: "/" -> "/index.html"."""
    if path == "/":
        return INDEX_PATH
    return path


def parse_request(
    raw: bytes,
    client_address: Optional[Tuple[str, int]] = None,
) -> ParsedRequest:
    """Parse with the default maximum request size."""
    return RequestParser().parse(raw, client_address)
