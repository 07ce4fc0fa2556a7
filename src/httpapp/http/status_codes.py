"""
=============================================================================
HTTP STATUS CODE TABLE
=============================================================================

Maps numeric HTTP status codes to the status-line templates we emit.

=============================================================================
STATUS LINES, NOT JUST PHRASES
=============================================================================

A response does not send "404" on its own. It sends a full status line,
and the protocol version is part of that line:

    HTTP/1.1 404 Not Found
    ──┬───── ─┬─ ────┬────
      │       │      └── Reason phrase
      │       └───────── Status code
      └───────────────── Version (configured per application)

So the table stores *templates* with a {version} placeholder:

    404 → "HTTP/{version} 404 Not Found"

and the version is substituted at the very last moment, when the header
is transmitted. An application configured for HTTP/1.0 gets
"HTTP/1.0 404 Not Found" from the same table.

=============================================================================
UNKNOWN CODES
=============================================================================

Unknown codes are never an error. A handler that sets 499 (a status some
proxies invent) still gets a usable, if bare, status line:

    499 → "HTTP/{version} 499"

=============================================================================
REDIRECTION CODES
=============================================================================

    ┌──────┬──────────────────────┬──────────────────────────────────────┐
    │ Code │ Phrase               │ Typical use                          │
    ├──────┼──────────────────────┼──────────────────────────────────────┤
    │ 301  │ Moved Permanently    │ Domain moves, canonical URLs         │
    │ 302  │ Found                │ Temporary, method may change         │
    │ 303  │ See other            │ Redirect-after-POST (our default)    │
    │ 307  │ Temporary Redirect   │ Temporary, method preserved          │
    │ 308  │ Permanent Redirect   │ Permanent, method preserved          │
    └──────┴──────────────────────┴──────────────────────────────────────┘

Only codes 300-399 that are present in the table count as redirection
codes. 399 is in range but unknown, so it is rejected as a redirect status.

=============================================================================
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Any, Mapping


class HTTPStatus(IntEnum):
    """
    HTTP status codes known to the status table.

    IntEnum members compare equal to plain integers, so handlers can use
    either form:

        >>> HTTPStatus.SEE_OTHER == 303
        True
        >>> HTTPStatus.SEE_OTHER.phrase
        'See other'
    """

    # 1xx INFORMATIONAL
    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101
    PROCESSING = 102

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206
    MULTI_STATUS = 207
    ALREADY_REPORTED = 208
    IM_USED = 226

    # 3xx REDIRECTION
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    UNUSED = 306                # Reserved, listed so the table stays contiguous
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTHENTICATION_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    PAYLOAD_TOO_LARGE = 413
    URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417
    IM_A_TEAPOT = 418
    MISDIRECTED_REQUEST = 421
    UNPROCESSABLE_ENTITY = 422
    LOCKED = 423
    FAILED_DEPENDENCY = 424
    UPGRADE_REQUIRED = 426
    PRECONDITION_REQUIRED = 428
    TOO_MANY_REQUESTS = 429
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431
    UNAVAILABLE_FOR_LEGAL_REASONS = 451

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505
    VARIANT_ALSO_NEGOTIATES = 506
    INSUFFICIENT_STORAGE = 507
    LOOP_DETECTED = 508
    NOT_EXTENDED = 510
    NETWORK_AUTHENTICATION_REQUIRED = 511

    @property
    def phrase(self) -> str:
        """Reason phrase as it appears in the status line."""
        return _STATUS_PHRASES[self]


# =============================================================================
# REASON PHRASES
# =============================================================================
#
# The phrases are emitted verbatim, including the historical spellings
# ("See other", "(Unused)") that existing clients and log parsers expect.
#
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.CONTINUE: "Continue",
    HTTPStatus.SWITCHING_PROTOCOLS: "Switching Protocols",
    HTTPStatus.PROCESSING: "Processing",

    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.NON_AUTHORITATIVE_INFORMATION: "Non-Authoritative Information",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.RESET_CONTENT: "Reset Content",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",
    HTTPStatus.MULTI_STATUS: "Multi-Status",
    HTTPStatus.ALREADY_REPORTED: "Already Reported",
    HTTPStatus.IM_USED: "IM Used",

    HTTPStatus.MULTIPLE_CHOICES: "Multiple Choices",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.SEE_OTHER: "See other",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.USE_PROXY: "Use Proxy",
    HTTPStatus.UNUSED: "(Unused)",
    HTTPStatus.TEMPORARY_REDIRECT: "Temporary Redirect",
    HTTPStatus.PERMANENT_REDIRECT: "Permanent Redirect",

    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.PAYMENT_REQUIRED: "Payment Required",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.NOT_ACCEPTABLE: "Not Acceptable",
    HTTPStatus.PROXY_AUTHENTICATION_REQUIRED: "Proxy Authentication Required",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.CONFLICT: "Conflict",
    HTTPStatus.GONE: "Gone",
    HTTPStatus.LENGTH_REQUIRED: "Length Required",
    HTTPStatus.PRECONDITION_FAILED: "Precondition Failed",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.URI_TOO_LONG: "URI Too Long",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",
    HTTPStatus.EXPECTATION_FAILED: "Expectation Failed",
    HTTPStatus.IM_A_TEAPOT: "I'm a teapot",
    HTTPStatus.MISDIRECTED_REQUEST: "Misdirected Request",
    HTTPStatus.UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    HTTPStatus.LOCKED: "Locked",
    HTTPStatus.FAILED_DEPENDENCY: "Failed Dependency",
    HTTPStatus.UPGRADE_REQUIRED: "Upgrade Required",
    HTTPStatus.PRECONDITION_REQUIRED: "Precondition Required",
    HTTPStatus.TOO_MANY_REQUESTS: "Too Many Requests",
    HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE: "Request Header Fields Too Large",
    HTTPStatus.UNAVAILABLE_FOR_LEGAL_REASONS: "Unavailable For Legal Reasons",

    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.BAD_GATEWAY: "Bad Gateway",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.GATEWAY_TIMEOUT: "Gateway Timeout",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
    HTTPStatus.VARIANT_ALSO_NEGOTIATES: "Variant Also Negotiates",
    HTTPStatus.INSUFFICIENT_STORAGE: "Insufficient Storage",
    HTTPStatus.LOOP_DETECTED: "Loop Detected",
    HTTPStatus.NOT_EXTENDED: "Not Extended",
    HTTPStatus.NETWORK_AUTHENTICATION_REQUIRED: "Network Authentication Required",
}


def _as_code(value: Any) -> int:
    """Coerce a status value to int, raising TypeError/ValueError if impossible."""
    if isinstance(value, bool):
        raise TypeError("a boolean is not an HTTP status code")
    return int(value)


class StatusCodeTable:
    """
    Read-only lookup from status code to status-line template.

    The templates are built once from HTTPStatus and frozen behind a
    MappingProxyType, so every component can share the same instance
    (STATUS_TABLE below) without any risk of one of them editing it.

    Example:
        >>> STATUS_TABLE.format(404, "1.1")
        'HTTP/1.1 404 Not Found'
        >>> STATUS_TABLE.format(499, "1.1")
        'HTTP/1.1 499'
    """

    VERSION_PLACEHOLDER = "{version}"

    def __init__(self) -> None:
        self._templates: Mapping[int, str] = MappingProxyType({
            int(status): f"HTTP/{self.VERSION_PLACEHOLDER} {int(status)} {status.phrase}"
            for status in HTTPStatus
        })

    @property
    def templates(self) -> Mapping[int, str]:
        return self._templates

    def lookup(self, code: int) -> str:
        """
        Get the status-line template for a code.

        Unknown codes get a generic "HTTP/{version} <code>" template.
        """
        code = int(code)
        template = self._templates.get(code)
        if template is None:
            template = f"HTTP/{self.VERSION_PLACEHOLDER} {code}"
        return template

    def format(self, code: int, http_version: str = "1.1") -> str:
        """Render the status line for a code and protocol version."""
        return self.lookup(code).replace(self.VERSION_PLACEHOLDER, http_version)

    def is_known(self, code: Any) -> bool:
        try:
            return _as_code(code) in self._templates
        except (TypeError, ValueError):
            return False

    def is_redirection_code(self, code: Any) -> bool:
        """True for a known code in the 300-399 range."""
        try:
            value = _as_code(code)
        except (TypeError, ValueError):
            return False
        return 299 < value < 400 and value in self._templates


# Shared by reference across the package.
STATUS_TABLE = StatusCodeTable()
