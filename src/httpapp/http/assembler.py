"""
=============================================================================
HEADER ASSEMBLY
=============================================================================

Turns whatever a handler left in the response carrier into a header set
that is safe to transmit.

=============================================================================
PREPARATION ORDER
=============================================================================

prepare_for_transmission() runs four steps, always in this order:

    ┌───┬───────────────────────┬──────────────────────────────────────┐
    │ 1 │ Content-Type default  │ "<mime>; charset=<charset>"          │
    │ 2 │ Cache policy          │ no-cache set, or Expires/Last-Mod    │
    │ 3 │                       │   defaults when caching is allowed   │
    │ 4 │ Status pseudo-header  │ from the carrier's numeric status    │
    └───┴───────────────────────┴──────────────────────────────────────┘

Every step only fills in what is missing (or replaces a value with the
exact same one), so later steps see the defaults chosen by earlier ones
and running the whole thing twice changes nothing.

=============================================================================
CACHE POLICY
=============================================================================

    cacheable = False (the default):

        Expires: Wed, 17 Aug 2005 00:00:00 GMT          ← in the past
        Last-Modified: <now>                            ← always "changed"
        Cache-Control: no-store, no-cache, must-revalidate,
                       post-check=0, pre-check=0
        Pragma: no-cache                                ← HTTP/1.0 caches

    cacheable = True:

        Expires: <now + 15 minutes>                     ← unless set
        Last-Modified: <modified_date in UTC>           ← unless set

Cache-Control and Pragma are added to whatever the handler already put
there instead of replacing it.

=============================================================================
THE STATUS PSEUDO-HEADER
=============================================================================

The carrier tracks the status twice: as a number and, once prepared, as
a "Status" header holding that number. Redirects write the Status header
directly. At transmission time the header is not sent as "Status: 303"
but rendered through the status table into the real status line:

    Status: 303   ─────►   HTTP/1.1 303 See other

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
import re
from typing import Callable, Dict, List, Optional

from .response import HTTPResponse, format_http_date
from .status_codes import StatusCodeTable, STATUS_TABLE


logger = logging.getLogger(__name__)


EXPIRED_DATE = "Wed, 17 Aug 2005 00:00:00 GMT"
NO_CACHE_CONTROL = "no-store, no-cache, must-revalidate, post-check=0, pre-check=0"
CACHE_LIFETIME = timedelta(seconds=900)

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ResponseContext:
    """
    Per-request settings the assembler needs.

    The cacheability flag lives here instead of in a module global, so
    two applications (or two tests) never see each other's choice.
    """

    mime_type: str = "text/html"
    charset: str = "utf-8"
    http_version: str = "1.1"
    modified_date: Optional[datetime] = None
    cacheable: bool = False

    def allow_cache(self, allow: Optional[bool] = None) -> bool:
        """
        Get, and optionally set, whether the response may be cached.

        Args:
            allow: New value, or None to only read the current one

        Returns:
            The (possibly updated) flag
        """
        if allow is not None:
            self.cacheable = bool(allow)
        return self.cacheable


class HeaderAssembler:
    """
    Header operations and the pre-transmission normalisation pass.

    Args:
        table: Status table used to render status lines
        clock: Callable returning the current aware UTC datetime
    """

    def __init__(
        self,
        table: StatusCodeTable = STATUS_TABLE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.table = table
        self.clock = clock or _utcnow

    # =========================================================================
    # HEADER OPERATIONS
    # =========================================================================

    def set_header(self, carrier: HTTPResponse, name: str, value, replace: bool = False) -> HTTPResponse:
        """
        Set a header on the carrier. Never raises for string-able input.

        Args:
            carrier: Response to mutate
            name: Header name (stored with this casing if new)
            value: Header value, converted with str()
            replace: Drop every existing value for the name first
        """
        return carrier.set_header(str(name), str(value), replace=replace)

    def clear_headers(self, carrier: HTTPResponse) -> HTTPResponse:
        carrier.headers.clear()
        return carrier

    def get_headers(self, carrier: HTTPResponse) -> List[Dict[str, str]]:
        """Headers as a flat list of {"name": ..., "value": ...} dicts."""
        return [{"name": name, "value": value} for name, value in carrier.headers.items()]

    def _add_once(self, carrier: HTTPResponse, name: str, value: str) -> None:
        # Additive, but an identical value is never stacked twice.
        if value not in carrier.get_header(name):
            carrier.set_header(name, value)

    # =========================================================================
    # PREPARATION
    # =========================================================================

    def prepare_for_transmission(self, carrier: HTTPResponse, context: ResponseContext) -> HTTPResponse:
        """
        Fill in the default headers a response needs before it is sent.

        Args:
            carrier: Response to mutate in place
            context: MIME type, charset, cache flag, modification date

        Returns:
            The same carrier, for chaining
        """
        if not carrier.has_header("Content-Type"):
            carrier.set_header("Content-Type", f"{context.mime_type}; charset={context.charset}")

        if not context.cacheable:
            carrier.set_header("Expires", EXPIRED_DATE, replace=True)
            carrier.set_header("Last-Modified", format_http_date(self.clock()), replace=True)
            self._add_once(carrier, "Cache-Control", NO_CACHE_CONTROL)
            self._add_once(carrier, "Pragma", "no-cache")
        else:
            if not carrier.has_header("Expires"):
                carrier.set_header("Expires", format_http_date(self.clock() + CACHE_LIFETIME))

            if not carrier.has_header("Last-Modified") and context.modified_date is not None:
                modified = context.modified_date
                if modified.tzinfo is None:
                    modified = modified.replace(tzinfo=timezone.utc)
                carrier.set_header("Last-Modified", format_http_date(modified.astimezone(timezone.utc)))

        if not carrier.has_header("Status"):
            carrier.set_header("Status", str(carrier.status))

        logger.debug("Prepared %d header(s) for transmission", len(carrier.headers))
        return carrier

    def status_line(self, value: str, http_version: str = "1.1") -> str:
        """Render a Status header value as a full status line."""
        return self.table.format(status_value(value), http_version)


def status_value(value: str) -> int:
    """Numeric prefix of a Status header value, 0 when there is none."""
    match = _LEADING_DIGITS.match(str(value))
    return int(match.group(1)) if match else 0
