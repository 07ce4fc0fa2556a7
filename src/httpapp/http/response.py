"""
=============================================================================
RESPONSE CARRIER
=============================================================================

The mutable container that holds a response while the application is
still working on it: a numeric status, an ordered header multi-map and
a body stream.

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    Handler fills           HeaderAssembler          Transport emits
    HTTPResponse   ─────►   adds defaults   ─────►   status line, headers,
        │                   (content type,           then body bytes
        │                    cache policy,
        │                    Status header)
        │
    HTTPResponse(
      status=200,
      headers=Headers([...]),
      body=BodyStream(b"..."),
    )

The carrier is created once per request and mutated in place until it
is transmitted. Nothing in this module performs I/O.

=============================================================================
BODY STREAMS
=============================================================================

A BodyStream is a small in-memory stream with independent readable and
writable flags. Most bodies are both. The flags exist because a body
can be handed over by something else (a file-backed or detached stream)
and the append/prepend operations have to respect what that stream
actually supports:

    ┌──────────┬──────────┬─────────────────────────────────────────┐
    │ readable │ writable │ append_body(x)                          │
    ├──────────┼──────────┼─────────────────────────────────────────┤
    │   yes    │   yes    │ write x at the end                      │
    │   yes    │   no     │ new stream: old content + x             │
    │   no     │   yes    │ write x at the end                      │
    │   no     │   no     │ UnableToWriteBody                       │
    └──────────┴──────────┴─────────────────────────────────────────┘

prepend_body(x) always has to read the old content, so it only works
on readable streams.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from io import BytesIO
from typing import Union

from .headers import Headers
from .status_codes import HTTPStatus, STATUS_TABLE


class UnableToWriteBody(RuntimeError):
    """Raised when the response body can be neither written nor read."""

    def __init__(self, message: str = "Unable to write to the response body"):
        super().__init__(message)


class BodyStream:
    """
    In-memory response body.

    Example:
        >>> stream = BodyStream(b"Hello")
        >>> stream.write(b", World")
        7
        >>> stream.getvalue()
        b'Hello, World'
    """

    def __init__(self, content: bytes = b"", readable: bool = True, writable: bool = True):
        self._buffer = BytesIO()
        self._buffer.write(content)
        self._readable = readable
        self._writable = writable

    @property
    def readable(self) -> bool:
        return self._readable

    @property
    def writable(self) -> bool:
        return self._writable

    def write(self, data: bytes) -> int:
        if not self._writable:
            raise UnableToWriteBody()
        self._buffer.seek(0, 2)
        return self._buffer.write(data)

    def getvalue(self) -> bytes:
        """Whole content from the start; empty for unreadable streams."""
        if not self._readable:
            return b""
        return self._buffer.getvalue()

    def close(self) -> None:
        """Detach the stream. It can no longer be read or written."""
        self._readable = False
        self._writable = False
        self._buffer = BytesIO()

    def __len__(self) -> int:
        return len(self.getvalue())

    def __repr__(self) -> str:
        return (
            f"BodyStream({len(self._buffer.getvalue())} bytes, "
            f"readable={self._readable}, writable={self._writable})"
        )


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response that has not been transmitted yet.

    Headers are stored in a case-insensitive multi-map, so

        response.set_header("Vary", "Cookie")
        response.set_header("vary", "Accept-Encoding")

    leaves two values under the display name "Vary".
    """

    status: int = HTTPStatus.OK
    headers: Headers = field(default_factory=Headers)
    body: BodyStream = field(default_factory=BodyStream)

    def __post_init__(self):
        self.set_status(self.status)

    def set_status(self, status: int) -> "HTTPResponse":
        """
        Set the numeric status.

        Raises:
            ValueError: If the code is outside 100-599
        """
        code = int(status)
        if not 100 <= code <= 599:
            raise ValueError(f"Invalid HTTP status code: {status!r}. Must be 100-599.")
        self.status = code
        return self

    def status_line(self, http_version: str = "1.1") -> str:
        """Status line for the current status, e.g. 'HTTP/1.1 200 OK'."""
        return STATUS_TABLE.format(self.status, http_version)

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def get_header(self, name: str) -> list:
        """Every value for a header, in insertion order."""
        return self.headers.get_all(name)

    def set_header(self, name: str, value: str, replace: bool = False) -> "HTTPResponse":
        """
        Add a header value, optionally replacing all earlier values.

        Returns self for method chaining:
            response.set_header("X-One", "1").set_header("X-Two", "2")
        """
        if replace:
            self.headers.set(name, value)
        else:
            self.headers.add(name, value)
        return self

    def remove_header(self, name: str) -> "HTTPResponse":
        self.headers.remove(name)
        return self

    def set_body(self, body: Union[BodyStream, bytes]) -> "HTTPResponse":
        """Replace the body with a stream, or with a fresh stream holding bytes."""
        if isinstance(body, BodyStream):
            self.body = body
        else:
            self.body = BodyStream(bytes(body))
        return self


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Wed, 17 Aug 2005 00:00:00 GMT

    Aware datetimes are converted to UTC first; naive ones are taken to
    already be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
