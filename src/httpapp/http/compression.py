"""
=============================================================================
COMPRESSION NEGOTIATION
=============================================================================

Compresses a response body with gzip or deflate when the client asked
for it and nothing in the environment stands in the way.

=============================================================================
HOW NEGOTIATION WORKS
=============================================================================

    Client                                           Application
    ──────                                           ───────────
    Accept-Encoding: br, gzip, deflate
             │
             ▼
    ["br", "gzip", "deflate"]  ∩  {x-gzip, gzip, deflate}
             │
             ▼
    ["gzip", "deflate"]        (client order is kept)
             │
             ▼
    try gzip  ──ok──►  Content-Encoding: gzip
                       Vary: Accept-Encoding
                       body = gzip(body)
                       stop

Only the first encoding that works is applied. If gzip fails we fall
back to deflate; if every candidate fails the body goes out as it was,
with no encoding headers at all.

=============================================================================
WHEN WE DO NOTHING
=============================================================================

- The client accepts none of our encodings (e.g. only "br")
- Headers were already sent (we could not announce Content-Encoding)
- The connection is gone (nobody is listening)
- Compression is unavailable, e.g. a front-end already compresses output

=============================================================================
WHY LEVEL 4?
=============================================================================

zlib levels run from 1 (fast) to 9 (small). Responses are compressed on
every request, so we trade a few percent of size for much lower latency.
Level 4 compresses typical HTML to within a few percent of level 9.

=============================================================================
"""

import gzip
import logging
import zlib
from typing import Callable, Dict, Iterable, List

from .response import BodyStream, HTTPResponse


logger = logging.getLogger(__name__)


def _gzip(data: bytes, level: int) -> bytes:
    return gzip.compress(data, compresslevel=level)


def _deflate(data: bytes, level: int) -> bytes:
    return zlib.compress(data, level)


class CompressionNegotiator:
    """
    Chooses and applies a content encoding for a response.

    Example:
        negotiator = CompressionNegotiator()
        negotiator.negotiate(
            response,
            client_encodings=["br", "gzip"],
            can_transmit_headers=True,
            connection_alive=True,
            gzip_capable=True,
        )
        # response now carries Content-Encoding: gzip
    """

    # Client token → compression scheme.
    SUPPORTED: Dict[str, str] = {
        "x-gzip": "gzip",
        "gzip": "gzip",
        "deflate": "deflate",
    }

    COMPRESSORS: Dict[str, Callable[[bytes, int], bytes]] = {
        "gzip": _gzip,
        "deflate": _deflate,
    }

    def __init__(self, level: int = 4):
        """
        Args:
            level: zlib compression level (1-9)
        """
        self.level = level

    def candidates(self, client_encodings: Iterable[str]) -> List[str]:
        """Client encodings we support, in the client's preference order."""
        return [encoding for encoding in client_encodings if encoding in self.SUPPORTED]

    def negotiate(
        self,
        carrier: HTTPResponse,
        client_encodings: Iterable[str],
        can_transmit_headers: bool,
        connection_alive: bool,
        gzip_capable: bool,
    ) -> HTTPResponse:
        """
        Compress the carrier's body with the first workable encoding.

        Returns:
            The same carrier, compressed or untouched
        """
        encodings = self.candidates(client_encodings)
        if not encodings:
            return carrier

        if not can_transmit_headers or not connection_alive or not gzip_capable:
            logger.debug("Skipping compression: headers or connection unavailable")
            return carrier

        for encoding in encodings:
            scheme = self.SUPPORTED[encoding]
            data = carrier.body.getvalue()
            try:
                compressed = self.COMPRESSORS[scheme](data, self.level)
            except (zlib.error, OSError, ValueError) as e:
                logger.debug(f"{encoding} compression failed, trying next encoding: {e}")
                continue

            carrier.set_header("Content-Encoding", encoding, replace=True)
            carrier.set_header("Vary", "Accept-Encoding")
            carrier.set_body(BodyStream(compressed))

            logger.debug(f"Compressed body with {encoding}: {len(data)} -> {len(compressed)} bytes")
            break

        return carrier
