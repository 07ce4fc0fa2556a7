"""
=============================================================================
TRANSPORT
=============================================================================

The thin layer between a prepared response and whatever actually puts
bytes on the wire: a WSGI server, a CGI pipe, or a test.

=============================================================================
THE ONE-WAY DOOR
=============================================================================

    ┌──────────┐  send_header()  ┌──────────┐  write()/close()  ┌──────────┐
    │   NEW    │ ──────────────► │   NEW    │ ────────────────► │   SENT   │
    │          │  (buffered)     │          │                   │          │
    └──────────┘                 └──────────┘                   └──────────┘
                                                                     │
                                                       send_header() │
                                                                     ▼
                                                          HeadersAlreadySent

Headers can be set and replaced until the first body byte is written.
After that, the status line and headers are committed. Trying to emit
another header is a programming error, not something to recover from,
so it raises instead of being ignored.

Callers are expected to ask headers_sent() first, which is exactly what
the application does before sending headers or planning a redirect.

=============================================================================
"""

from abc import ABC, abstractmethod
from enum import Enum
import logging
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)


class HeadersAlreadySent(RuntimeError):
    """Raised when a header is emitted after the response was committed."""


class TransportState(Enum):
    NEW = "new"              # Headers may still change
    SENT = "sent"            # Status line and headers committed
    CLOSED = "closed"        # Response finished


class Transport(ABC):
    """Header and body emission primitives."""

    @abstractmethod
    def headers_sent(self) -> bool:
        """True once headers can no longer be changed."""

    @abstractmethod
    def connection_alive(self) -> bool:
        """True while the client is still there to receive the response."""

    @abstractmethod
    def send_header(self, line: str, replace: bool = True, code: Optional[int] = None) -> None:
        """
        Emit one header line.

        Args:
            line: "Name: value", or a full status line ("HTTP/1.1 303 See other")
            replace: Replace an earlier header of the same name
            code: Numeric status to set alongside the line
        """

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write body bytes, committing headers first."""

    @abstractmethod
    def close(self) -> None:
        """Finish the response."""


class BufferedTransport(Transport):
    """
    Collects the response in memory.

    Used by the WSGI adapter (which hands the collected status, headers
    and body to the WSGI server) and by tests.

    Example:
        transport = BufferedTransport()
        transport.send_header("HTTP/1.1 404 Not Found", True, 404)
        transport.send_header("Content-Type: text/plain")
        transport.write(b"nope")
        transport.status_code   # 404
        transport.headers       # [("Content-Type", "text/plain")]
    """

    def __init__(self, alive: bool = True):
        self.state = TransportState.NEW
        self.status_line: Optional[str] = None
        self.status_code: int = 200
        self.headers: List[Tuple[str, str]] = []
        self._chunks: List[bytes] = []
        self._alive = alive

    def headers_sent(self) -> bool:
        return self.state is not TransportState.NEW

    def connection_alive(self) -> bool:
        return self._alive and self.state is not TransportState.CLOSED

    def disconnect(self) -> None:
        """Simulate the client going away."""
        self._alive = False

    def send_header(self, line: str, replace: bool = True, code: Optional[int] = None) -> None:
        if self.headers_sent():
            raise HeadersAlreadySent(f"Cannot send header after the response was committed: {line!r}")

        line = line.replace("\0", "")

        if line.upper().startswith("HTTP/"):
            self.status_line = line
            if code:
                self.status_code = code
            return

        name, _, value = line.partition(":")
        name, value = name.strip(), value.strip()
        if replace:
            self.headers = [(n, v) for n, v in self.headers if n.lower() != name.lower()]
        self.headers.append((name, value))
        if code:
            self.status_code = code

    def write(self, data: bytes) -> None:
        if self.state is TransportState.CLOSED:
            raise HeadersAlreadySent("Cannot write to a closed response")
        self.state = TransportState.SENT
        self._chunks.append(data)

    def close(self) -> None:
        self.state = TransportState.CLOSED

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def header(self, name: str) -> Optional[str]:
        """First emitted value for a header name (case-insensitive)."""
        for n, v in self.headers:
            if n.lower() == name.lower():
                return v
        return None
