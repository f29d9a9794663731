"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per connection, written after the connection closes:

    text:  127.0.0.1 - - [16/Oct/2026:10:00:00 +0000] "GET /sync/a.txt" 200 1504 1.92ms [3f2a9c1e]
    json:  {"connection_id": "3f2a9c1e", "client_ip": "127.0.0.1", ...}

The logger is namespaced so it can be routed on its own:

    logging.getLogger("syncserver.access").addHandler(file_handler)

=============================================================================
"""

import json
import time
import logging
from dataclasses import dataclass


logger = logging.getLogger("syncserver.access")


@dataclass
class AccessLogEntry:
    """
    Structured record of one served connection.

    Malformed requests are logged with method and path "-".
    """

    connection_id: str
    client_ip: str
    method: str
    path: str
    status_code: int
    bytes_sent: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "method": self.method,
            "path": self.path,
            "status_code": self.status_code,
            "bytes_sent": self.bytes_sent,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Apache-style line, readable by the usual log tools."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.bytes_sent} {self.duration_ms:.2f}ms [{self.connection_id}]'
        )


class AccessLogger:
    """
    Emit AccessLogEntry records in the configured format.

    Args:
        log_format: "text" or "json".
        log_level: Level for access lines (INFO by default).
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def log(
        self,
        conn,
        method: str,
        path: str,
        status_code: int,
    ) -> AccessLogEntry:
        entry = AccessLogEntry(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=method or "-",
            path=path or "-",
            status_code=int(status_code),
            bytes_sent=conn.bytes_sent,
            duration_ms=conn.age * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
