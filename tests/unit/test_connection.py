"""
Unit tests for the connection wrapper.
"""

import socket

import pytest

from syncserver.core.connection import Connection, ConnectionState, InvalidTransition


@pytest.fixture
def socket_pair():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    server_side.close()
    client_side.close()


class TestLifecycle:

    def test_starts_accepted(self, socket_pair):
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 1))

        assert conn.state == ConnectionState.ACCEPTED
        assert len(conn.id) == 8

    def test_advances_forward(self, socket_pair):
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 1))

        conn.advance(ConnectionState.PARSED)
        conn.advance(ConnectionState.ROUTED)
        conn.advance(ConnectionState.HANDLED)

        assert conn.state == ConnectionState.HANDLED

    def test_cannot_go_backwards(self, socket_pair):
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 1))
        conn.advance(ConnectionState.ROUTED)

        with pytest.raises(InvalidTransition):
            conn.advance(ConnectionState.PARSED)

    def test_close_is_idempotent(self, socket_pair):
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 1))

        conn.close()
        conn.close()

        assert conn.is_closed


class TestIO:

    def test_single_receive(self, socket_pair):
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("127.0.0.1", 1), buffer_size=8)
        client_side.sendall(b"GET /stats HTTP/1.1\r\n")

        assert conn.receive() == b"GET /sta"
        assert conn.bytes_received == 8

    def test_receive_after_peer_close(self, socket_pair):
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("127.0.0.1", 1))
        client_side.close()

        assert conn.receive() == b""

    def test_receive_timeout_returns_empty(self, socket_pair):
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 1), timeout=0.05)

        assert conn.receive() == b""

    def test_send_counts_bytes(self, socket_pair):
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("127.0.0.1", 1))

        assert conn.send(b"hello") is True
        assert client_side.recv(16) == b"hello"
        assert conn.bytes_sent == 5

    def test_send_after_close_fails(self, socket_pair):
        conn = Connection(socket=socket_pair[0], address=("127.0.0.1", 1))
        conn.close()

        assert conn.send(b"late") is False
        assert conn.bytes_sent == 0

    def test_close_delivers_eof(self, socket_pair):
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("127.0.0.1", 1))
        conn.send(b"body")
        client_side.settimeout(2.0)

        conn.close()

        assert client_side.recv(16) == b"body"
        assert client_side.recv(16) == b""
