"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per transmitted response, in a human or a machine format.

    TEXT (default, Apache-like):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ [18/Oct/2026:10:55:36 +0000] "http://ex.com/app/" 303 0 1.20ms     │
    │  Timestamp                    Request URI          Code Size Time  │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    {"request_id": "a1b2c3d4", "request_uri": "http://ex.com/app/",
     "status_code": 303, "content_length": 0, "content_encoding": "",
     "duration_ms": 1.2, "timestamp": "..."}

The logger is namespaced ("httpapp.access") so deployments can route it
separately from application logs:

    logging.getLogger("httpapp.access").addHandler(file_handler)
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Optional


logger = logging.getLogger("httpapp.access")


@dataclass
class ResponseLog:
    """Structured access log entry for a response."""

    request_id: str
    request_uri: str
    status_code: int
    content_length: int
    content_encoding: str
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "request_uri": self.request_uri,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "content_encoding": self.content_encoding,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'[{self.timestamp}] "{self.request_uri}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Emits ResponseLog entries.

    Args:
        log_format: "text" or "json"
        log_level: Level the entries are logged at
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def start(self) -> float:
        """Timestamp to pass back to log() for the duration."""
        return time.time()

    def log(
        self,
        request_uri: str,
        status_code: int,
        content_length: int,
        started: float,
        content_encoding: Optional[str] = None,
    ) -> ResponseLog:
        entry = ResponseLog(
            request_id=str(uuid.uuid4())[:8],
            request_uri=request_uri,
            status_code=status_code,
            content_length=content_length,
            content_encoding=content_encoding or "",
            duration_ms=(time.time() - started) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
