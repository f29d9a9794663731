"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The protocol layer of the sync server is deliberately tiny:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   raw bytes ──► RequestParser ──► ParsedRequest                      │
    │                                        │                             │
    │                                        ▼                             │
    │                                  route() ──► RouteDecision            │
    │                                                   │                  │
    │                                                   ▼                  │
    │                          handler ──► HTTPResponse / streamed body     │
    │                                  └─► ResponseOutcome                  │
    └─────────────────────────────────────────────────────────────────────┘

    request.py       Method/path extraction from one recv()
    response.py      Status line + Content-Type head, small bodies
    router.py        Virtual endpoints and the static fallback
    status_codes.py  200/404/500 and the response-class outcome

=============================================================================
"""

from .request import (
    ParsedRequest,
    RequestParser,
    RequestParseError,
    normalize_path,
    parse_request,
)
from .response import (
    HTTPResponse,
    HTML,
    PLAIN_TEXT,
    OCTET_STREAM,
    ok,
    not_found,
    internal_error,
)
from .router import Router, RouteDecision, RouteKind, route
from .status_codes import HTTPStatus, ResponseOutcome, RESPONSE_CLASSES

__all__ = [
    # Request
    "ParsedRequest",
    "RequestParser",
    "RequestParseError",
    "normalize_path",
    "parse_request",
    # Response
    "HTTPResponse",
    "HTML",
    "PLAIN_TEXT",
    "OCTET_STREAM",
    "ok",
    "not_found",
    "internal_error",
    # Routing
    "Router",
    "RouteDecision",
    "RouteKind",
    "route",
    # Status
    "HTTPStatus",
    "ResponseOutcome",
    "RESPONSE_CLASSES",
]
