"""
=============================================================================
WSGI BINDING
=============================================================================

Runs a WebApplication under any WSGI server (wsgiref, gunicorn, uWSGI...).

    ┌──────────────┐   environ    ┌──────────────┐   ServerEnvironment   ┌────────────────┐
    │ WSGI server  │ ───────────► │ WSGIAdapter  │ ────────────────────► │ WebApplication │
    │              │ ◄─────────── │              │ ◄──────────────────── │                │
    └──────────────┘ start_resp.  └──────────────┘   BufferedTransport   └────────────────┘
                     + [body]

The WSGI environ already is a CGI-style variable set, so it only needs
three adjustments before the application sees it:

    REQUEST_URI   not part of WSGI; rebuilt from SCRIPT_NAME + PATH_INFO
                  (+ "?" + QUERY_STRING)
    SCRIPT_NAME   in WSGI this is the mount point ("/app"), not a script,
                  so the front controller name is appended ("/app/index.php")
    HTTPS         derived from wsgi.url_scheme

Usage:

    from wsgiref.simple_server import make_server
    from httpapp.wsgi import WSGIAdapter

    make_server("127.0.0.1", 8080, WSGIAdapter(HelloApplication)).serve_forever()
"""

import dataclasses
import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Type

from .application import WebApplication
from .config import AppConfig
from .core.transport import BufferedTransport
from .http.uri import FRONT_CONTROLLER, ServerEnvironment


logger = logging.getLogger(__name__)


StartResponse = Callable[..., Any]


def build_environment(environ: Mapping[str, Any]) -> ServerEnvironment:
    """Translate a WSGI environ into the server variables the resolver reads."""
    variables: Dict[str, Any] = {
        key: value for key, value in environ.items() if isinstance(value, str)
    }

    if not variables.get("HTTP_HOST"):
        # PEP 3333 URL reconstruction
        host = environ.get("SERVER_NAME", "")
        port = str(environ.get("SERVER_PORT", ""))
        scheme = environ.get("wsgi.url_scheme", "http")
        if port and (scheme, port) not in (("http", "80"), ("https", "443")):
            host = f"{host}:{port}"
        variables["HTTP_HOST"] = host

    mount = environ.get("SCRIPT_NAME", "").rstrip("/")
    path_info = environ.get("PATH_INFO", "")

    if not variables.get("REQUEST_URI"):
        request_uri = mount + path_info
        query_string = environ.get("QUERY_STRING", "")
        if query_string:
            request_uri += "?" + query_string
        variables["REQUEST_URI"] = request_uri or "/"

    variables.setdefault("PHP_SELF", mount + path_info or "/")
    variables["SCRIPT_NAME"] = f"{mount}/{FRONT_CONTROLLER}"

    if environ.get("wsgi.url_scheme") == "https":
        variables["HTTPS"] = "on"

    return ServerEnvironment(variables)


class WSGIAdapter:
    """
    WSGI callable that runs one fresh application per request.

    Args:
        app_class: WebApplication subclass to instantiate per request
        config: Shared settings; each request works on its own copy so the
            published uri.* entries never leak between requests
    """

    def __init__(self, app_class: Type[WebApplication], config: Optional[AppConfig] = None):
        self.app_class = app_class
        self.config = config or AppConfig()

    def __call__(self, environ: Dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        transport = BufferedTransport()
        config = dataclasses.replace(self.config, entries=dict(self.config.entries))

        app = self.app_class(
            config=config,
            environment=build_environment(environ),
            transport=transport,
        )
        app.execute()

        status = self._status(transport)
        logger.debug(f"{environ.get('REQUEST_METHOD', 'GET')} {environ.get('PATH_INFO', '/')} -> {status}")
        start_response(status, list(transport.headers))

        if environ.get("REQUEST_METHOD") == "HEAD":
            return [b""]
        return [transport.body]

    @staticmethod
    def _status(transport: BufferedTransport) -> str:
        # "HTTP/1.1 303 See other" → "303 See other"
        if not transport.status_line:
            return f"{transport.status_code} Unknown"

        _, _, status = transport.status_line.partition(" ")
        if " " not in status:
            status += " Unknown"
        return status
