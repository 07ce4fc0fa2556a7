"""
=============================================================================
WEB APPLICATION
=============================================================================

The request lifecycle, composed from the smaller components:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      WebApplication.execute()                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   __init__        UriResolver ──► uri.* entries in the config       │
    │       │                                                             │
    │       ▼                                                             │
    │   do_execute()    your code: set_body(), set_header(), redirect()   │
    │       │                                                             │
    │       ▼                                                             │
    │   compress()      CompressionNegotiator (only with config.gzip)     │
    │       │                                                             │
    │       ▼                                                             │
    │   respond()       HeaderAssembler.prepare_for_transmission()        │
    │                   send_headers()  ──► Transport (at most once)      │
    │                   body            ──► Transport                     │
    │                   AccessLogger                                      │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Each component only receives what it needs as arguments (the carrier,
the server environment, a ResponseContext). The application is the one
place that owns them all for the duration of a request.

=============================================================================
USAGE
=============================================================================

    class HelloApplication(WebApplication):
        def do_execute(self):
            if self.get("uri.route") == "old":
                self.redirect("index.php?view=new")
                return
            self.set_body("<h1>Hello</h1>")

    app = HelloApplication(environment=os.environ, transport=transport)
    app.execute()

=============================================================================
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .access_log import AccessLogger
from .config import AppConfig
from .core.transport import BufferedTransport, Transport
from .http.assembler import HeaderAssembler, ResponseContext, status_value
from .http.client import WebClient
from .http.compression import CompressionNegotiator
from .http.redirect import RedirectAction, RedirectContext, RedirectPlanner, RedirectStrategy, is_ascii
from .http.response import BodyStream, HTTPResponse, UnableToWriteBody
from .http.status_codes import HTTPStatus, STATUS_TABLE
from .http.uri import ResolvedUris, ServerEnvironment, UriResolver


logger = logging.getLogger(__name__)


Content = Union[str, bytes]


class WebApplication(ABC):
    """
    Base class for web applications.

    Subclasses implement do_execute(). Everything else (headers, body,
    caching, compression, redirects, URI resolution) is provided.

    Args:
        config: Application settings; defaults to AppConfig()
        environment: Server variables (os.environ, a WSGI environ, a dict)
        client: Detected client; derived from the environment if omitted
        response: Carrier to fill; a fresh HTTPResponse if omitted
        transport: Where the response is emitted; in-memory if omitted
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        environment: Optional[Union[ServerEnvironment, Mapping[str, Any]]] = None,
        client: Optional[WebClient] = None,
        response: Optional[HTTPResponse] = None,
        transport: Optional[Transport] = None,
    ):
        self.config = config or AppConfig()

        if isinstance(environment, ServerEnvironment):
            self.environment = environment
        else:
            self.environment = ServerEnvironment(environment)

        self.client = client or WebClient.from_environment(self.environment)
        self.response = response or HTTPResponse()
        self.transport = transport or BufferedTransport()

        self.context = ResponseContext(
            mime_type=self.config.mime_type,
            charset=self.config.charset,
            http_version=self.config.http_version,
            cacheable=self.config.cacheable,
        )

        self.assembler = HeaderAssembler()
        self.negotiator = CompressionNegotiator()
        self.resolver = UriResolver()
        self.planner = RedirectPlanner()
        self.access_log = AccessLogger(self.config.log_format)

        self.uris: Optional[ResolvedUris] = None
        self.closed = False

        self.load_system_uris()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    def do_execute(self) -> None:
        """Application logic: fill the response."""

    def execute(self) -> None:
        """
        Run the application and send the response.

        Errors raised by do_execute() are logged and handed to on_error();
        the response is sent either way.
        """
        started = self.access_log.start()

        try:
            self.do_execute()

            if self.config.gzip and not self.config.server_compression:
                self.compress()
        except Exception as e:
            logger.exception(f"Application error while handling {self.get('uri.request')}: {e}")
            self.on_error(e)

        if not self.closed:
            self.respond(started)

    def on_error(self, error: Exception) -> None:
        """Turn an unhandled error into a 500 when headers are still ours."""
        if not self.transport.headers_sent():
            self.response.set_status(HTTPStatus.INTERNAL_SERVER_ERROR)
            self.set_header("Status", str(int(HTTPStatus.INTERNAL_SERVER_ERROR)), replace=True)

    def compress(self) -> None:
        """Compress the body with the best encoding the client accepts."""
        self.negotiator.negotiate(
            self.response,
            self.client.encodings,
            can_transmit_headers=not self.transport.headers_sent(),
            connection_alive=self.transport.connection_alive(),
            gzip_capable=not self.config.server_compression,
        )

    def respond(self, started: Optional[float] = None) -> None:
        """Prepare headers, transmit them and write the body."""
        if started is None:
            started = self.access_log.start()

        self.assembler.prepare_for_transmission(self.response, self.context)
        self.send_headers()

        body = self.get_body()
        self.transport.write(body)

        status = self.response.headers.get("Status", str(self.response.status))
        self.access_log.log(
            request_uri=self.get("uri.request", ""),
            status_code=status_value(status),
            content_length=len(body),
            started=started,
            content_encoding=self.response.headers.get("Content-Encoding"),
        )

    def close(self) -> None:
        """End the request/response cycle."""
        self.transport.close()
        self.closed = True

    # =========================================================================
    # CONFIGURATION ENTRIES
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> Any:
        return self.config.set(key, value)

    # =========================================================================
    # HEADERS
    # =========================================================================

    def set_header(self, name: str, value: Any, replace: bool = False) -> "WebApplication":
        self.assembler.set_header(self.response, name, value, replace)
        return self

    def clear_headers(self) -> "WebApplication":
        self.assembler.clear_headers(self.response)
        return self

    def get_headers(self) -> List[Dict[str, str]]:
        return self.assembler.get_headers(self.response)

    def send_headers(self) -> "WebApplication":
        """
        Emit every header through the transport, unless already sent.

        The Status pseudo-header becomes the status line; everything else
        goes out as "Name: value", one line per value.
        """
        if self.transport.headers_sent():
            return self

        for header in self.get_headers():
            name, value = header["name"], header["value"]
            if name.lower() == "status":
                line = self.assembler.status_line(value, self.context.http_version)
                self.transport.send_header(line, True, status_value(value))
            else:
                self.transport.send_header(f"{name}: {value}", False)

        return self

    def allow_cache(self, allow: Optional[bool] = None) -> bool:
        return self.context.allow_cache(allow)

    # =========================================================================
    # BODY
    # =========================================================================

    def _encode(self, content: Content) -> bytes:
        if isinstance(content, bytes):
            return content
        return str(content).encode(self.context.charset)

    def set_body(self, content: Content) -> "WebApplication":
        self.response.set_body(BodyStream(self._encode(content)))
        return self

    def append_body(self, content: Content) -> "WebApplication":
        """
        Add content at the end of the body.

        Raises:
            UnableToWriteBody: The current stream is neither writable nor readable
        """
        data = self._encode(content)
        current = self.response.body

        if current.writable:
            current.write(data)
        elif current.readable:
            self.response.set_body(BodyStream(current.getvalue() + data))
        else:
            raise UnableToWriteBody()

        return self

    def prepend_body(self, content: Content) -> "WebApplication":
        """
        Add content at the start of the body.

        Raises:
            UnableToWriteBody: The current stream is not readable
        """
        current = self.response.body
        if not current.readable:
            raise UnableToWriteBody()

        self.response.set_body(BodyStream(self._encode(content) + current.getvalue()))
        return self

    def get_body(self) -> bytes:
        return self.response.body.getvalue()

    # =========================================================================
    # STATUS, URIS AND REDIRECTS
    # =========================================================================

    @staticmethod
    def is_valid_http_status(code: Any) -> bool:
        return STATUS_TABLE.is_known(code)

    @staticmethod
    def is_ascii(value: Content) -> bool:
        return is_ascii(value)

    def is_ssl_connection(self) -> bool:
        return self.resolver.is_ssl_connection(self.environment)

    def load_system_uris(self, request_uri: Optional[str] = None) -> ResolvedUris:
        """
        Resolve and publish the uri.* entries.

        Args:
            request_uri: Explicit request URI; detected from the environment if omitted
        """
        self.uris = self.resolver.load_system_uris(
            self.environment,
            request_uri=request_uri,
            site_uri=self.config.site_uri,
            media_uri=self.config.media_uri,
            cgi_path_info_fixed=self.config.cgi_path_info_fixed,
        )

        self.config.entries.pop("uri.route", None)
        for key, value in self.uris.as_entries().items():
            self.set(key, value)

        return self.uris

    def redirect(self, url: str, status: Any = HTTPStatus.SEE_OTHER) -> RedirectAction:
        """
        Redirect the client and end the request.

        Args:
            url: Target URL, absolute or relative to the current request
            status: Redirect status (303 by default)

        Raises:
            InvalidRedirectStatus: Before anything is changed, for a bad status
        """
        action = self.planner.plan(
            url,
            status,
            RedirectContext(
                base_full=self.get("uri.base.full", ""),
                request_uri=self.get("uri.request", ""),
                headers_sent=self.transport.headers_sent(),
                client_engine=self.client.engine,
                charset=self.context.charset,
            ),
            stacklevel=3,
        )

        if action.strategy is RedirectStrategy.SCRIPT:
            self.transport.write(self._encode(action.body))
        elif action.strategy is RedirectStrategy.HTML_DOCUMENT:
            self.prepend_body(action.body)
        else:
            self.set_header("Status", str(action.status), replace=True)
            self.set_header("Location", action.url, replace=True)

        logger.info(f"Redirecting ({action.status}, {action.strategy.value}) to {action.url}")

        self.respond()
        self.close()
        return action
