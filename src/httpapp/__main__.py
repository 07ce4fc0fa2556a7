"""
=============================================================================
HTTPAPP CLI ENTRY POINT
=============================================================================

Two commands:

    uris    Resolve the system URIs for a set of server variables and
            print them as JSON. Handy when a deployment behind a proxy
            produces surprising links.

    serve   Run a small demo application under wsgiref.

=============================================================================
USAGE
=============================================================================

    # What would the application see for this request?
    python -m httpapp uris \\
        --env HTTP_HOST=example.com \\
        --env SCRIPT_NAME=/app/index.php \\
        --env PHP_SELF=/app/index.php \\
        --env REQUEST_URI=/app/index.php/articles

    # Same, with a pinned site URI
    python -m httpapp uris --site-uri https://www.example.com/ --env HTTP_HOST=internal:8080

    # Demo server with compression
    python -m httpapp serve --port 8080 --gzip

Settings not given on the command line come from HTTPAPP_* environment
variables (see httpapp.config).

=============================================================================
"""

import argparse
import html
import json
import logging
import sys
from typing import Dict, List, Optional
from wsgiref.simple_server import make_server

from . import __version__
from .application import WebApplication
from .config import AppConfig
from .wsgi import WSGIAdapter


logger = logging.getLogger("httpapp")


class DemoApplication(WebApplication):
    """
    Shows the resolved URIs; /old redirects to /new.
    """

    def do_execute(self) -> None:
        route = self.get("uri.route", "") or ""
        if route.split("?")[0].rstrip("/") == "old":
            self.redirect("new")
            return

        rows = "".join(
            f"<tr><td>{html.escape(key)}</td><td>{html.escape(str(value))}</td></tr>"
            for key, value in self.config.entries.items()
        )
        self.set_body(
            "<!DOCTYPE html><html><head><title>httpapp</title></head><body>"
            "<h1>httpapp</h1>"
            f"<table>{rows}</table>"
            f'<p><a href="{html.escape(self.get("uri.base.full"))}old">Try a redirect</a></p>'
            "</body></html>"
        )


def _setup_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("httpapp").setLevel(level)


def _parse_env(pairs: List[str]) -> Dict[str, str]:
    variables = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        variables[name] = value
    return variables


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m httpapp",
        description="Response assembly and URI resolution for web applications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httpapp uris --env HTTP_HOST=example.com --env SCRIPT_NAME=/app/index.php
  python -m httpapp uris --request-uri http://example.com/app/index.php/foo
  python -m httpapp serve                        # Demo on 127.0.0.1:8080
  python -m httpapp serve --port 3000 --gzip     # With compression
        """
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: HTTPAPP_LOG_LEVEL or INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httpapp {__version__}"
    )

    commands = parser.add_subparsers(dest="command")
    commands.required = True

    # ─────────────────────────────────────────────────────────────────────
    # uris
    # ─────────────────────────────────────────────────────────────────────

    uris = commands.add_parser("uris", help="Print the resolved uri.* entries as JSON")
    uris.add_argument(
        "--env", "-e",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Server variable (repeatable)"
    )
    uris.add_argument("--request-uri", default=None, help="Explicit request URI (skips detection)")
    uris.add_argument("--site-uri", default=None, help="Override the detected base URI")
    uris.add_argument("--media-uri", default=None, help="Override the media URI")
    uris.add_argument(
        "--cgi-unfixed-pathinfo",
        action="store_true",
        help="CGI gateway leaves PATH_INFO in SCRIPT_NAME (use PHP_SELF for the base path)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # serve
    # ─────────────────────────────────────────────────────────────────────

    serve = commands.add_parser("serve", help="Run the demo application")
    serve.add_argument("--host", "-H", default=None, help="Host to bind to (default: 127.0.0.1)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Port to listen on (default: 8080)")
    serve.add_argument("--gzip", action="store_true", help="Compress responses when the client accepts it")
    serve.add_argument("--cacheable", action="store_true", help="Send cache headers instead of no-cache")

    return parser


class _UriProbe(WebApplication):
    def do_execute(self) -> None:
        pass


def _command_uris(args: argparse.Namespace, config: AppConfig) -> int:
    if args.site_uri is not None:
        config.site_uri = args.site_uri
    if args.media_uri is not None:
        config.media_uri = args.media_uri
    if args.cgi_unfixed_pathinfo:
        config.cgi_path_info_fixed = False

    probe = _UriProbe(config=config, environment=_parse_env(args.env))
    uris = probe.load_system_uris(args.request_uri)

    print(json.dumps(uris.as_entries(), indent=2))
    return 0


def _command_serve(args: argparse.Namespace, config: AppConfig) -> int:
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.gzip:
        config.gzip = True
    if args.cacheable:
        config.cacheable = True

    config.validate()

    with make_server(config.host, config.port, WSGIAdapter(DemoApplication, config)) as server:
        logger.info(f"Serving demo application on http://{config.host}:{config.port}/")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = AppConfig.from_env()
    if args.log_level:
        config.log_level = args.log_level

    _setup_logging(config.log_level)

    try:
        if args.command == "uris":
            return _command_uris(args, config)
        return _command_serve(args, config)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Parse command-line arguments
# 2. Build AppConfig from HTTPAPP_* variables, then apply CLI overrides
# 3. uris:  resolve and print the uri.* entries
#    serve: wrap DemoApplication in WSGIAdapter and run wsgiref
# =============================================================================
