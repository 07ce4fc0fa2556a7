"""
=============================================================================
REDIRECT PLANNING
=============================================================================

Decides *where* a redirect goes, *which* status it uses and *how* it is
delivered, without touching the response. The application applies the
resulting RedirectAction.

=============================================================================
TARGET RESOLUTION
=============================================================================

    Input                          Base / request URI                 Target
    ─────                          ──────────────────                 ──────
    "index.php?task=x"             base http://ex.com/app/            http://ex.com/app/index.php?task=x
    "/login"                       request http://ex.com/app/a/b      http://ex.com/login
    "edit"                         request http://ex.com/app/a/b      http://ex.com/app/a/edit
    "https://other.org/"           (anything)                         https://other.org/

Only the first line of the target is kept. A target such as

    "/ok\\r\\nSet-Cookie: session=evil"

would otherwise smuggle a second header into the response (response
splitting).

=============================================================================
DELIVERY STRATEGIES
=============================================================================

    ┌─────────────────┬──────────────────────────────────────────────────┐
    │ HEADER          │ Status + Location headers. The normal case.      │
    ├─────────────────┼──────────────────────────────────────────────────┤
    │ SCRIPT          │ Headers are already on the wire, so a Location   │
    │                 │ header is impossible. Emit a <script> that       │
    │                 │ navigates instead.                               │
    ├─────────────────┼──────────────────────────────────────────────────┤
    │ HTML_DOCUMENT   │ Legacy fallback for Trident (old Internet        │
    │                 │ Explorer), which mangles non-ASCII Location      │
    │                 │ headers. Send a tiny HTML page declaring the     │
    │                 │ charset, with the same <script> navigation.      │
    └─────────────────┴──────────────────────────────────────────────────┘

HTML_DOCUMENT only matters for browsers that are long out of support.
It stays as an explicitly named strategy, never the default; it is a
candidate for removal once no supported client reports Trident.

=============================================================================
STATUS VALUES
=============================================================================

    303 (default)  See other, the right answer after a POST
    True           301, deprecated boolean form ("moved permanently?")
    False          303, deprecated boolean form
    "307"          accepted, it names a known redirection code
    "teapot"       InvalidRedirectStatus

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
import json
import logging
import re
from typing import Any, Optional, Union
import warnings

from .client import WebClient
from .status_codes import HTTPStatus, StatusCodeTable, STATUS_TABLE
from .uri import FRONT_CONTROLLER, split_uri


logger = logging.getLogger(__name__)


_SCHEME = re.compile(r"^[a-z]+://", re.IGNORECASE)
_LINE_BREAK = re.compile(r"[\r\n]")


class InvalidRedirectStatus(ValueError):
    """Raised when a redirect is asked for with an unusable status."""

    def __init__(self, status: Any):
        super().__init__(f"You have not supplied a valid HTTP status code: {status!r}")
        self.status = status


class RedirectStrategy(Enum):
    HEADER = "header"
    SCRIPT = "script"
    HTML_DOCUMENT = "html_document"


@dataclass
class RedirectContext:
    """What the planner needs to know about the current request."""

    base_full: str = ""
    request_uri: str = ""
    headers_sent: bool = False
    client_engine: str = WebClient.UNKNOWN
    url_is_ascii: Optional[bool] = None
    charset: str = "utf-8"


@dataclass
class RedirectAction:
    """
    A planned redirect.

    For HEADER the application sets Status and Location; for the other
    strategies `body` holds the markup to emit.
    """

    url: str
    status: int
    strategy: RedirectStrategy
    body: str = ""


def is_ascii(value: Union[str, bytes]) -> bool:
    """True when every character (or byte) is in the 7-bit ASCII range."""
    if isinstance(value, str):
        return all(ord(char) < 0x80 for char in value)
    return all(byte < 0x80 for byte in value)


def script_redirect(url: str) -> str:
    """<script> element that navigates to url."""
    return f"<script>document.location.href={_js_string(url)};</script>"


def _js_string(value: str) -> str:
    # "/" is escaped so a target can never close the <script> element.
    return json.dumps(value).replace("/", "\\/")


class RedirectPlanner:
    """
    Plans redirects against the application's resolved URIs.

    Example:
        planner = RedirectPlanner()
        action = planner.plan(
            "index.php?task=x",
            context=RedirectContext(base_full="http://example.com/app/"),
        )
        action.url       # "http://example.com/app/index.php?task=x"
        action.status    # 303
        action.strategy  # RedirectStrategy.HEADER
    """

    def __init__(self, table: StatusCodeTable = STATUS_TABLE):
        self.table = table

    def normalize_status(self, status: Any, stacklevel: int = 2) -> int:
        """
        Turn the caller's status argument into an integer code.

        stacklevel is handed to warnings.warn for the boolean form, so
        the deprecation points at whoever asked for the redirect.

        Raises:
            InvalidRedirectStatus: Neither an integer nor a known redirection code
        """
        if isinstance(status, bool):
            warnings.warn(
                "Passing a boolean redirect status is deprecated, pass an integer instead.",
                DeprecationWarning,
                stacklevel=stacklevel,
            )
            return int(HTTPStatus.MOVED_PERMANENTLY if status else HTTPStatus.SEE_OTHER)

        if isinstance(status, int):
            return int(status)

        if self.table.is_redirection_code(status):
            return int(status)

        raise InvalidRedirectStatus(status)

    def resolve_url(self, url: str, base_full: str, request_uri: str) -> str:
        """Make a redirect target absolute and strip anything after a line break."""
        if url.startswith(FRONT_CONTROLLER):
            url = base_full + url

        url = _LINE_BREAK.split(url, 1)[0]

        if not _SCHEME.match(url):
            prefix, path = split_uri(request_uri)
            if url.startswith("/"):
                url = prefix + url
            else:
                # Relative to the directory of the current request
                directory = "/".join(path.split("/")[:-1]) + "/"
                url = prefix + directory + url

        return url

    def plan(
        self,
        url: str,
        status: Any = HTTPStatus.SEE_OTHER,
        context: Optional[RedirectContext] = None,
        stacklevel: int = 2,
    ) -> RedirectAction:
        """
        Plan a redirect.

        Args:
            url: Target, absolute or relative
            status: Integer status (deprecated: boolean)
            context: Request facts; defaults to an empty context
            stacklevel: warnings.warn stacklevel for the boolean-status
                warning, counted from plan() itself

        Returns:
            RedirectAction describing target, status and delivery
        """
        context = context or RedirectContext()

        # Validated first so a bad status never leaves a half-done redirect.
        code = self.normalize_status(status, stacklevel=stacklevel + 1)
        target = self.resolve_url(str(url), context.base_full, context.request_uri)

        url_is_ascii = context.url_is_ascii
        if url_is_ascii is None:
            url_is_ascii = is_ascii(target)

        if context.headers_sent:
            strategy = RedirectStrategy.SCRIPT
            body = script_redirect(target) + "\n"
        elif context.client_engine == WebClient.TRIDENT and not url_is_ascii:
            strategy = RedirectStrategy.HTML_DOCUMENT
            body = (
                "<html><head>"
                f'<meta http-equiv="content-type" content="text/html; charset={context.charset}" />'
                f"{script_redirect(target)}"
                "</head><body></body></html>"
            )
        else:
            strategy = RedirectStrategy.HEADER
            body = ""

        logger.debug(f"Planned {strategy.value} redirect ({code}) to {target}")
        return RedirectAction(url=target, status=code, strategy=strategy, body=body)
