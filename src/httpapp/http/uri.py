"""
=============================================================================
URI RESOLUTION
=============================================================================

Works out where the application lives from the variables the web server
hands us, so links and redirects can be made absolute.

=============================================================================
TWO WAYS SERVERS REPORT THE REQUEST
=============================================================================

    ORIGIN-SERVER STYLE (Apache, nginx + FastCGI, most gateways today)

        HTTP_HOST    = example.com
        PHP_SELF     = /app/index.php
        REQUEST_URI  = /app/index.php/articles?page=2
                       ──────────────┬─────────────────
                                     └── path *and* query as sent

        request = http:// + HTTP_HOST + REQUEST_URI

    GATEWAY STYLE (IIS and friends: no REQUEST_URI)

        HTTP_HOST    = example.com
        SCRIPT_NAME  = /app/index.php
        QUERY_STRING = page=2

        request = http:// + HTTP_HOST + SCRIPT_NAME + "?" + QUERY_STRING

Every one of these values comes from the client (HTTP_HOST is just the
Host header), so the assembled URI has quotes and angle brackets
percent-encoded before anything else sees it.

=============================================================================
WHAT GETS RESOLVED
=============================================================================

    request     http://example.com/app/index.php/articles
    base.host   http://example.com
    base.path                     /app/
    base.full   http://example.com/app/
    route                              index.php/articles
    media.path                    /app/media/
    media.full  http://example.com/app/media/

    - base.full is always base.host + base.path
    - base.path always ends with "/"
    - route only exists when request starts with base.full

site_uri and media_uri settings override detection; an empty or blank
override counts as "not set".

=============================================================================
INTERVIEW QUESTIONS ABOUT BASE URL DETECTION
=============================================================================

Q: "Why not just trust HTTP_HOST?"
A: "It is the client's Host header. A crafted value can end up in
   redirects and generated links (host header injection). We escape
   quote and angle-bracket characters, and deployments that care pin
   the base with an explicit site_uri instead of detecting it."

Q: "Why does the base path come from SCRIPT_NAME, not REQUEST_URI?"
A: "REQUEST_URI includes the route (/app/index.php/articles). The
   directory of the front-controller script (/app) is where the
   application is mounted, whatever route was requested."

=============================================================================
"""

from dataclasses import dataclass
import logging
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import urlsplit


logger = logging.getLogger(__name__)


# Characters escaped in detected request URIs.
_UNSAFE_URI_CHARS = (
    ("'", "%27"),
    ('"', "%22"),
    ("<", "%3C"),
    (">", "%3E"),
)

FRONT_CONTROLLER = "index.php"


class ServerEnvironment:
    """
    Read-only view of server variables.

    Missing variables read as the empty string, and every value comes
    back as a str, so callers never have to guard against None.
    """

    def __init__(self, variables: Optional[Mapping[str, object]] = None):
        self._variables = dict(variables or {})

    def get(self, name: str, default: str = "") -> str:
        value = self._variables.get(name)
        if value is None:
            return default
        return str(value)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def as_dict(self) -> Dict[str, object]:
        return dict(self._variables)

    def __repr__(self) -> str:
        return f"ServerEnvironment({len(self._variables)} variables)"


@dataclass(frozen=True)
class ResolvedUris:
    """The URIs an application derives for itself at startup."""

    request: str
    base_full: str
    base_host: str
    base_path: str
    route: Optional[str]
    media_full: str
    media_path: str

    def as_entries(self) -> Dict[str, str]:
        """Configuration entries, keyed the way the application publishes them."""
        entries = {
            "uri.request": self.request,
            "uri.base.full": self.base_full,
            "uri.base.host": self.base_host,
            "uri.base.path": self.base_path,
        }
        if self.route is not None:
            entries["uri.route"] = self.route
        entries["uri.media.full"] = self.media_full
        entries["uri.media.path"] = self.media_path
        return entries


# =============================================================================
# URI HELPERS
# =============================================================================

def split_uri(uri: str) -> Tuple[str, str]:
    """
    Split a URI into its host prefix and its path.

    The host prefix is scheme, user info, host and port exactly as
    written: "http://user:pw@example.com:8080/a/b" → ("http://user:pw@example.com:8080", "/a/b").
    Unparseable input (a broken IPv6 literal in a Host header, say)
    yields ("", "").
    """
    try:
        parts = urlsplit(uri)
    except ValueError as e:
        logger.warning(f"Could not parse URI {uri!r}: {e}")
        return "", ""

    prefix = f"{parts.scheme}://" if parts.scheme else ""
    return prefix + parts.netloc, parts.path


def dirname(path: str) -> str:
    """
    Directory part of a script path.

    Trailing slashes are ignored, the root stays "/", and a bare file
    name lives in ".":

        "/app/index.php" → "/app"
        "/index.php"     → "/"
        "index.php"      → "."
        ""               → ""
    """
    if not path:
        return ""
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    if "/" not in stripped:
        return "."
    head = stripped.rsplit("/", 1)[0].rstrip("/")
    return head or "/"


def _strip_front_controller(path: str) -> str:
    # Removes exactly len("index.php") characters at the first match.
    position = path.find(FRONT_CONTROLLER)
    if position == -1:
        return path
    return path[:position] + path[position + 9:]


class UriResolver:
    """
    Detects the request URI and derives base, route and media URIs.

    Example:
        env = ServerEnvironment({
            "HTTP_HOST": "example.com",
            "SCRIPT_NAME": "/app/index.php",
            "PHP_SELF": "/app/index.php",
            "REQUEST_URI": "/app/index.php/foo",
        })
        uris = UriResolver().load_system_uris(env)
        uris.base_full   # "http://example.com/app/"
        uris.route       # "index.php/foo"
    """

    def is_ssl_connection(self, env: ServerEnvironment) -> bool:
        """
        Whether the request reached us over TLS.

        HTTPS is set by the server itself ("on", "1", anything but "off").
        X-Forwarded-Proto is set by a TLS-terminating proxy in front of it.
        """
        https = env.get("HTTPS")
        if https and https.lower() != "off":
            return True

        forwarded_proto = env.get("HTTP_X_FORWARDED_PROTO")
        return bool(forwarded_proto) and forwarded_proto.lower() == "https"

    def detect_request_uri(self, env: ServerEnvironment) -> str:
        """Rebuild the full URI of the current request from server variables."""
        scheme = "https://" if self.is_ssl_connection(env) else "http://"

        php_self = env.get("PHP_SELF")
        request_uri = env.get("REQUEST_URI")

        uri = scheme + env.get("HTTP_HOST")

        if php_self and request_uri:
            # Origin-server style: REQUEST_URI already carries path and query
            uri += request_uri
        else:
            # Gateway style: script name plus query string
            uri += env.get("SCRIPT_NAME")
            query_string = env.get("QUERY_STRING")
            if query_string:
                uri += "?" + query_string

        for char, escaped in _UNSAFE_URI_CHARS:
            uri = uri.replace(char, escaped)

        return uri.strip()

    def load_system_uris(
        self,
        env: ServerEnvironment,
        request_uri: Optional[str] = None,
        site_uri: Optional[str] = None,
        media_uri: Optional[str] = None,
        cgi_path_info_fixed: bool = True,
    ) -> ResolvedUris:
        """
        Resolve every URI the application needs.

        Args:
            env: Server variables of the current request
            request_uri: Explicit request URI (skips detection)
            site_uri: Explicit base URI of the application
            media_uri: Explicit media URI, absolute or a path
            cgi_path_info_fixed: False when a CGI gateway leaves PATH_INFO
                inside SCRIPT_NAME, in which case PHP_SELF is used instead

        Returns:
            ResolvedUris with request, base, route and media values
        """
        request = request_uri if request_uri else self.detect_request_uri(env)

        site_uri = (site_uri or "").strip()
        if site_uri:
            host, path = split_uri(site_uri)
        else:
            host, _ = split_uri(request)
            if self._uses_cgi_script_path(env, cgi_path_info_fixed):
                path = dirname(env.get("PHP_SELF"))
            else:
                path = dirname(env.get("SCRIPT_NAME"))

        path = _strip_front_controller(path).rstrip("/\\")

        base_path = path + "/"
        base_full = host + base_path

        route = None
        if request[:len(base_full)].lower() == base_full.lower():
            route = request[len(base_full):]

        media_uri = (media_uri or "").strip()
        if media_uri:
            if "://" in media_uri:
                media_full = media_path = media_uri
            else:
                media_uri = media_uri.strip("/\\")
                media_path = f"/{media_uri}/" if media_uri else "/"
                media_full = host + media_path
        else:
            media_full = base_full + "media/"
            media_path = base_path + "media/"

        resolved = ResolvedUris(
            request=request,
            base_full=base_full,
            base_host=host,
            base_path=base_path,
            route=route,
            media_full=media_full,
            media_path=media_path,
        )
        logger.debug(f"Resolved system URIs: {resolved}")
        return resolved

    @staticmethod
    def _uses_cgi_script_path(env: ServerEnvironment, cgi_path_info_fixed: bool) -> bool:
        is_cgi = env.get("GATEWAY_INTERFACE").upper().startswith("CGI")
        return is_cgi and not cgi_path_info_fixed and bool(env.get("REQUEST_URI"))
