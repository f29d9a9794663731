"""
Unit tests for access logging.
"""

import json
import logging

from conftest import FakeConnection
from syncserver.access_log import AccessLogger


class TestAccessLogger:

    def test_text_line(self, caplog):
        conn = FakeConnection()
        conn.send(b"x" * 42)

        with caplog.at_level(logging.INFO, logger="syncserver.access"):
            entry = AccessLogger().log(conn, "GET", "/sync/a.txt", 200)

        assert entry.bytes_sent == 42
        line = caplog.records[-1].getMessage()
        assert line.startswith("127.0.0.1 - - [")
        assert '"GET /sync/a.txt" 200 42' in line
        assert line.endswith("[test0001]")

    def test_json_line(self, caplog):
        with caplog.at_level(logging.INFO, logger="syncserver.access"):
            AccessLogger(log_format="json").log(FakeConnection(), "GET", "/stats", 200)

        data = json.loads(caplog.records[-1].getMessage())
        assert data["connection_id"] == "test0001"
        assert data["path"] == "/stats"
        assert data["status_code"] == 200

    def test_malformed_request_uses_dashes(self):
        entry = AccessLogger().log(FakeConnection(), "", "", 404)

        assert entry.method == "-"
        assert entry.path == "-"
