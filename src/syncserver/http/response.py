"""
=============================================================================
HTTP RESPONSE WRITING
=============================================================================

Every response the server sends has the same minimal shape:

    ┌─────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                  ← status line             │
    │  Content-Type: text/plain\r\n         ← the ONLY header         │
    │  \r\n                                 ← end of head             │
    │  ...body bytes...                     ← optional                │
    └─────────────────────────────────────────────────────────────────┘

There is no Content-Length. The connection is closed after every
response, and the close marks the end of the body for the client. This
lets file handlers stream a file of unknown size chunk by chunk after the
head has already been sent.

=============================================================================
TWO WAYS TO SEND
=============================================================================

    SMALL, FIXED BODIES (404 page, stats text):
        conn.send(not_found().to_bytes())

    STREAMED BODIES (file download, directory listing):
        conn.send(HTTPResponse(HTTPStatus.OK, OCTET_STREAM).head_bytes())
        for chunk in file:
            conn.send(chunk)

=============================================================================
"""

from dataclasses import dataclass
from typing import Union

from .status_codes import HTTPStatus


HTML = "text/html"
PLAIN_TEXT = "text/plain"
OCTET_STREAM = "application/octet-stream"

NOT_FOUND_BODY = b"<h1>404 Not Found</h1>"


@dataclass
class HTTPResponse:
    """
    A status, one Content-Type header and an optional body.

    Example:
        >>> HTTPResponse(HTTPStatus.NOT_FOUND, HTML, b"<h1>404</h1>").to_bytes()
        b'HTTP/1.1 404 Not Found\\r\\nContent-Type: text/html\\r\\n\\r\\n<h1>404</h1>'
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = PLAIN_TEXT
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE"""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body, encoding strings as UTF-8. Returns self for chaining."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def head_bytes(self) -> bytes:
        """Status line and header, terminated by the blank line."""
        return (
            f"{self.status_line}\r\n"
            f"Content-Type: {self.content_type}\r\n"
            f"\r\n"
        ).encode("latin-1")

    def to_bytes(self) -> bytes:
        """Head followed by the whole body."""
        return self.head_bytes() + self.body


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================

def ok(body: Union[str, bytes] = b"", content_type: str = PLAIN_TEXT) -> HTTPResponse:
    """200 OK."""
    return HTTPResponse(HTTPStatus.OK, content_type).set_body(body)


def not_found() -> HTTPResponse:
    """404 with the small HTML body every rejection uses."""
    return HTTPResponse(HTTPStatus.NOT_FOUND, HTML, NOT_FOUND_BODY)


def internal_error() -> HTTPResponse:
    """500 with an empty body."""
    return HTTPResponse(HTTPStatus.INTERNAL_SERVER_ERROR, PLAIN_TEXT)
