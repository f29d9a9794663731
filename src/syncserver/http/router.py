"""
=============================================================================
REQUEST ROUTING
=============================================================================

Routing is a pure function from a parsed request to a RouteDecision. A
small fixed set of virtual endpoints shadows the generic static-file
fallback:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  ROUTE TABLE (first match wins)                      │
    ├──────────────────────────┬──────────────────────────────────────────┤
    │ path == "/stats"         │ DIAGNOSTICS        (any method)          │
    │ path == "/sync"          │ LIST_DIRECTORY     (any method)          │
    │ path starts "/sync/"     │ DOWNLOAD_NAMED(rest of path)             │
    │ method == "GET"          │ SERVE_STATIC(path)                       │
    │ anything else            │ REJECTED                                 │
    └──────────────────────────┴──────────────────────────────────────────┘

The method only matters for the fallback: "POST /stats" is answered with
diagnostics, while "POST /notes.html" is rejected with a 404. A request
that could not be parsed at all is also REJECTED.

=============================================================================
DISPATCH
=============================================================================

Router keeps a table of one handler per RouteKind. Handlers write the
response to the connection themselves and return the ResponseOutcome:

    router = Router()
    router.register(RouteKind.DIAGNOSTICS, stats_handler)
    ...
    decision = router.match(request)
    outcome = router.dispatch(decision, conn)

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from .request import ParsedRequest
from .status_codes import ResponseOutcome


STATS_PATH = "/stats"
SYNC_PATH = "/sync"
SYNC_PREFIX = "/sync/"


class RouteKind(Enum):
    DIAGNOSTICS = "diagnostics"
    LIST_DIRECTORY = "list_directory"
    DOWNLOAD_NAMED = "download_named"
    SERVE_STATIC = "serve_static"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RouteDecision:
    """
    Which handler runs, and with what argument.

    Attributes:
        kind: The selected handler variant.
        target: Filename for DOWNLOAD_NAMED, request path for SERVE_STATIC,
                empty for the others.
    """

    kind: RouteKind
    target: str = ""


REJECTED = RouteDecision(RouteKind.REJECTED)

# handler(conn, target) -> outcome
RouteHandler = Callable[[object, str], ResponseOutcome]


def route(request: Optional[ParsedRequest]) -> RouteDecision:
    """
    Map a request to a RouteDecision.

    Args:
        request: The parsed request, or None if parsing failed.

    Returns:
        The first matching decision from the route table.
    """
    if request is None:
        return REJECTED

    path = request.path

    if path == STATS_PATH:
        return RouteDecision(RouteKind.DIAGNOSTICS)

    if path == SYNC_PATH:
        return RouteDecision(RouteKind.LIST_DIRECTORY)

    if path.startswith(SYNC_PREFIX):
        return RouteDecision(RouteKind.DOWNLOAD_NAMED, path[len(SYNC_PREFIX):])

    if request.is_get:
        return RouteDecision(RouteKind.SERVE_STATIC, path)

    return REJECTED


class Router:
    """Route table plus the handler registered for each RouteKind."""

    def __init__(self):
        self._handlers: Dict[RouteKind, RouteHandler] = {}

    def register(self, kind: RouteKind, handler: RouteHandler) -> "Router":
        """Register the handler for a kind. Returns self for chaining."""
        self._handlers[kind] = handler
        return self

    def match(self, request: Optional[ParsedRequest]) -> RouteDecision:
        return route(request)

    def dispatch(self, decision: RouteDecision, conn) -> ResponseOutcome:
        """
        Run the handler for a decision.

        Raises:
            LookupError: If no handler is registered for the decision's kind.
        """
        try:
            handler = self._handlers[decision.kind]
        except KeyError:
            raise LookupError(f"No handler registered for {decision.kind.value}") from None
        return handler(conn, decision.target)

    @property
    def kinds(self):
        """Route kinds that have a handler registered."""
        return set(self._handlers)
