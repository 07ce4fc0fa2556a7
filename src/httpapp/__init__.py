"""
=============================================================================
HTTPAPP - Response Assembly and URI Resolution for Web Applications
=============================================================================

This package is the part of a web application that sits between "the
handler produced some content" and "bytes went out to the client":

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       WHAT HTTPAPP DOES                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   1. URI RESOLUTION                                                 │
    │      - Rebuilds the request URI from server variables               │
    │      - Derives base, route and media URIs                           │
    │                                                                     │
    │   2. RESPONSE ASSEMBLY                                              │
    │      - Default Content-Type, cache / no-cache headers               │
    │      - Status pseudo-header rendered as a status line               │
    │                                                                     │
    │   3. COMPRESSION                                                    │
    │      - gzip / deflate negotiated from Accept-Encoding               │
    │                                                                     │
    │   4. REDIRECTS                                                      │
    │      - Relative targets made absolute, response splitting blocked   │
    │      - Header, script or HTML delivery depending on the request     │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpapp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m httpapp)
    ├── application.py       # WebApplication lifecycle
    ├── wsgi.py              # WSGI binding
    ├── config.py            # AppConfig dataclass
    ├── access_log.py        # Per-response access log
    ├── core/
    │   └── transport.py     # Header/body emission
    └── http/
        ├── status_codes.py  # Status enum and status-line table
        ├── headers.py       # Case-insensitive multi-map
        ├── response.py      # Response carrier and body stream
        ├── assembler.py     # Header preparation
        ├── compression.py   # Content-encoding negotiation
        ├── client.py        # User agent / Accept-Encoding detection
        ├── uri.py           # System URI resolution
        └── redirect.py      # Redirect planning

=============================================================================
QUICK START
=============================================================================

    from httpapp import WebApplication, WSGIAdapter

    class HelloApplication(WebApplication):
        def do_execute(self):
            self.set_body(f"<p>Mounted at {self.get('uri.base.full')}</p>")

    application = WSGIAdapter(HelloApplication)   # any WSGI server

=============================================================================
"""

__version__ = "1.0.0"

from .application import WebApplication
from .config import AppConfig
from .wsgi import WSGIAdapter

__all__ = ["WebApplication", "AppConfig", "WSGIAdapter", "__version__"]
