"""
=============================================================================
HTTP STATUS CODES AND RESPONSE OUTCOMES
=============================================================================

The sync server only ever answers with three status lines:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK                    - file, listing or stats sent   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 404 Not Found             - missing file, rejected request│
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - document root unreadable      │
    └────────┴───────────────────────────────────────────────────────────┘

Every handler ends in exactly one ResponseOutcome. The outcome decides the
status line written to the client AND which response-class counter the
stats registry increments, so the two can never disagree.

=============================================================================
"""

from enum import Enum, IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum, so codes compare as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line (``HTTP/1.1 200 OK``)."""
        return _STATUS_PHRASES[self]

    @property
    def response_class(self) -> str:
        """
        Hundreds-digit grouping of the code.

        200 -> "2xx", 404 -> "4xx", 500 -> "5xx"
        """
        return f"{int(self) // 100}xx"

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}

# Counter keys tracked by the stats registry, in display order
RESPONSE_CLASSES = ("2xx", "4xx", "5xx")


class ResponseOutcome(Enum):
    """
    Result of handling one request.

    The value is the HTTPStatus written on the wire.
    """

    OK = HTTPStatus.OK
    NOT_FOUND = HTTPStatus.NOT_FOUND
    SERVER_ERROR = HTTPStatus.INTERNAL_SERVER_ERROR

    @property
    def status(self) -> HTTPStatus:
        return self.value

    @property
    def response_class(self) -> str:
        return self.value.response_class
