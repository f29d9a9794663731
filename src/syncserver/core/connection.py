"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket. A Connection is owned by
exactly one worker thread from accept() to close(); it is never shared.

=============================================================================
ONE EXCHANGE PER CONNECTION
=============================================================================

Unlike a keep-alive server, the sync server does one thing per socket:

    ┌─────────────────────────────────────────────────────────────────┐
    │   ACCEPTED ──► PARSED ──► ROUTED ──► HANDLED ──► CLOSED          │
    │                                                                  │
    │   Strictly linear. No retries, no second request, no resumed     │
    │   partial responses. Any state may jump straight to CLOSED.      │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
A SINGLE recv()
=============================================================================

TCP is a byte stream, so one recv() may return only part of what the
client sent. A general HTTP server loops until it sees "\\r\\n\\r\\n". This
server does not: it reads ONCE, up to buffer_size bytes, and parses
whatever came back. In practice the request line of a small GET arrives
in the first segment. A request line split across segments, or longer
than the buffer, is parsed truncated.

    recv(1024) ──► b"GET /sync/a.txt HTTP/1.1\\r\\nHost: ..."   parsed
    recv(1024) ──► b""                                         empty, rejected
    recv(1024) ──► ConnectionResetError                        empty, rejected

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """
    Connection lifecycle states, in the only order they can occur.
    """
    ACCEPTED = 1   # Socket handed to a worker, nothing read yet
    PARSED = 2     # Request line parsed (or found malformed)
    ROUTED = 3     # Route decision made
    HANDLED = 4    # Response written, outcome known
    CLOSED = 5     # Socket released


class InvalidTransition(RuntimeError):
    """Raised when a connection would move backwards in its lifecycle."""


@dataclass
class Connection:
    """
    A client connection owned by one worker.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used in log lines.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
        bytes_received: Bytes returned by the single receive.
        bytes_sent: Bytes successfully written (head and body).
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)
    bytes_received: int = 0
    bytes_sent: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 1024
    timeout: Optional[float] = None

    def __post_init__(self):
        # Accepted sockets may inherit the listener's accept timeout
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    def advance(self, state: ConnectionState) -> None:
        """
        Move to a later lifecycle state.

        Raises:
            InvalidTransition: If ``state`` is not after the current one.
        """
        if state.value <= self.state.value:
            raise InvalidTransition(
                f"[{self.id}] cannot move from {self.state.name} to {state.name}"
            )
        self.state = state

    # =========================================================================
    # READING
    # =========================================================================

    def receive(self) -> bytes:
        """
        Read the request with a single recv() of up to buffer_size bytes.

        Returns:
            The bytes read. Empty if the peer closed, reset or timed out.
        """
        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout:
            logger.warning(f"[{self.id}] Receive timed out")
            return b""
        except OSError as e:
            logger.warning(f"[{self.id}] Receive failed: {e}")
            return b""

        self.bytes_received = len(data)
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> bool:
        """
        Send all of ``data`` to the client.

        Uses sendall() because send() may write only part of the buffer.

        Returns:
            True if everything was sent, False if the client went away.
        """
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.bytes_sent += len(data)
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR) sends FIN: the client sees end-of-body.
        2. Drain anything the client still sends (request bytes past the
           single read). Closing with unread data makes the kernel send
           RST, which can discard the response before the client reads it.
        3. close() releases the file descriptor.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
