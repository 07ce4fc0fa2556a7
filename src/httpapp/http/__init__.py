"""
=============================================================================
HTTP RESPONSE ENGINE
=============================================================================

Everything that shapes a response before it leaves the application:

    status_codes   code → "HTTP/{version} code phrase"
    headers        case-insensitive, multi-valued header storage
    response       the carrier (status, headers, body stream)
    assembler      default headers, cache policy, Status header
    compression    gzip / deflate negotiation
    client         engine and Accept-Encoding detection
    uri            request, base, route and media URIs
    redirect       where a redirect goes and how it is delivered

None of these modules know about a server or a socket. They operate on
values passed in, which keeps them easy to test in isolation.
"""

from .assembler import HeaderAssembler, ResponseContext
from .client import WebClient
from .compression import CompressionNegotiator
from .headers import Headers
from .redirect import InvalidRedirectStatus, RedirectAction, RedirectPlanner, RedirectStrategy
from .response import BodyStream, HTTPResponse, UnableToWriteBody, format_http_date
from .status_codes import HTTPStatus, StatusCodeTable, STATUS_TABLE
from .uri import ResolvedUris, ServerEnvironment, UriResolver

# Public API - what you get when you do:
# from httpapp.http import *
__all__ = [
    # Status codes
    "HTTPStatus",
    "StatusCodeTable",
    "STATUS_TABLE",

    # Carrier
    "Headers",
    "HTTPResponse",
    "BodyStream",
    "UnableToWriteBody",
    "format_http_date",

    # Assembly
    "HeaderAssembler",
    "ResponseContext",
    "CompressionNegotiator",

    # Request facts
    "WebClient",
    "ServerEnvironment",
    "UriResolver",
    "ResolvedUris",

    # Redirects
    "RedirectPlanner",
    "RedirectAction",
    "RedirectStrategy",
    "InvalidRedirectStatus",
]
