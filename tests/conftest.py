"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
import time
from pathlib import Path
from typing import Callable, Generator, List, Optional, Tuple

import pytest

from syncserver import SyncServer, ServerConfig
from syncserver.core import StatsRegistry
from syncserver.filesystem import DocumentRoot


INDEX_HTML = b"<html><body>home</body></html>"
A_TXT = b"alpha\n"
B_TXT = b"bravo bravo\n"


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """Document root with an index page, two text files and a subdirectory."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "a.txt").write_bytes(A_TXT)
    (root / "b.txt").write_bytes(B_TXT)
    (root / "nested").mkdir()
    (root / "nested" / "page.html").write_bytes(b"<p>nested</p>")
    return root


@pytest.fixture
def docs(doc_root: Path) -> DocumentRoot:
    return DocumentRoot(doc_root)


@pytest.fixture
def stats() -> StatsRegistry:
    return StatsRegistry()


class FakeConnection:
    """
    Stand-in for Connection in handler tests: records what was sent.

    Args:
        fail_after: Number of successful sends before every send fails,
                    as if the client had disconnected.
    """

    def __init__(self, fail_after: Optional[int] = None):
        self.id = "test0001"
        self.address = ("127.0.0.1", 50000)
        self.client_ip = "127.0.0.1"
        self.sent: List[bytes] = []
        self.bytes_sent = 0
        self.age = 0.0
        self.fail_after = fail_after

    def send(self, data: bytes) -> bool:
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            return False
        self.sent.append(data)
        self.bytes_sent += len(data)
        return True

    @property
    def data(self) -> bytes:
        return b"".join(self.sent)


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


def split_response(raw: bytes) -> Tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return lines[0], headers, body


def scandir_files(root: Path) -> List[str]:
    """Regular file names in the directory's own enumeration order."""
    with os.scandir(root) as entries:
        return [entry.name for entry in entries if entry.is_file(follow_symlinks=False)]


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll until predicate() is true. Returns False on timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class RunningServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: SyncServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes, then read the response until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            if raw:
                s.sendall(raw)
            chunks = []
            while True:
                data = s.recv(4096)
                if not data:
                    break
                chunks.append(data)
        return b"".join(chunks)

    def get(self, path: str) -> bytes:
        return self.request(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


@pytest.fixture
def server_config(doc_root: Path) -> ServerConfig:
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        doc_root=str(doc_root),
        accept_timeout=0.1,
        timeout=5.0,
        install_signal_handlers=False,
        log_level="WARNING",
    )


@pytest.fixture
def running_server(server_config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A started SyncServer serving ``doc_root`` on a free port."""
    test_srv = RunningServer(SyncServer(server_config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
