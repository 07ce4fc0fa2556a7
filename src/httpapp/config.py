"""
=============================================================================
APPLICATION CONFIGURATION
=============================================================================

Centralized settings for a web application, plus a small registry of
named entries that the application publishes at runtime (the resolved
"uri.*" values).

=============================================================================
12-FACTOR CONFIGURATION
=============================================================================

Settings come from code or from the environment:

    ┌────────────────────────┬──────────────────────┬───────────────────┐
    │ Variable               │ Field                │ Default           │
    ├────────────────────────┼──────────────────────┼───────────────────┤
    │ HTTPAPP_CHARSET        │ charset              │ utf-8             │
    │ HTTPAPP_MIME_TYPE      │ mime_type            │ text/html         │
    │ HTTPAPP_HTTP_VERSION   │ http_version         │ 1.1               │
    │ HTTPAPP_GZIP           │ gzip                 │ false             │
    │ HTTPAPP_SERVER_GZIP    │ server_compression   │ false             │
    │ HTTPAPP_CACHEABLE      │ cacheable            │ false             │
    │ HTTPAPP_SITE_URI       │ site_uri             │ "" (detect)       │
    │ HTTPAPP_MEDIA_URI      │ media_uri            │ "" (base/media/)  │
    │ HTTPAPP_CGI_PATHINFO   │ cgi_path_info_fixed  │ true              │
    │ HTTPAPP_LOG_LEVEL      │ log_level            │ INFO              │
    │ HTTPAPP_LOG_FORMAT     │ log_format           │ text              │
    │ HTTPAPP_HOST / _PORT   │ host / port          │ 127.0.0.1 / 8080  │
    └────────────────────────┴──────────────────────┴───────────────────┘

The HTTPAPP_ prefix matters: CGI-style servers already put HTTP_* names
into the environment for request headers (HTTP_HOST is the Host header),
so settings must never share that namespace.

=============================================================================
INTERVIEW QUESTIONS ABOUT CONFIGURATION
=============================================================================

Q: "Why an explicit site_uri when the base URL can be detected?"
A: "Detection trusts the Host header. Behind proxies, or when links must
   be stable regardless of how the site was reached, pinning the base
   URI is both safer and predictable."

Q: "How do you validate configuration?"
A: "Eagerly, at startup. validate() raises with a clear message instead
   of letting a bad HTTP version surface in the first response."

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict


_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class AppConfig:
    """
    Configuration for a web application.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    RESPONSE DEFAULTS
    - charset, mime_type, http_version, cacheable

    COMPRESSION
    - gzip, server_compression

    URI RESOLUTION
    - site_uri, media_uri, cgi_path_info_fixed

    LOGGING
    - log_level, log_format

    DEMO SERVER
    - host, port

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE DEFAULTS
    # ─────────────────────────────────────────────────────────────────────

    charset: str = "utf-8"
    """Charset declared in the default Content-Type and used to encode text bodies."""

    mime_type: str = "text/html"
    """MIME type used when a handler does not set Content-Type itself."""

    http_version: str = "1.1"
    """Protocol version written into status lines."""

    cacheable: bool = False
    """
    Initial cacheability of responses.
    False sends no-cache headers; handlers can flip it per request
    with WebApplication.allow_cache(True).
    """

    # ─────────────────────────────────────────────────────────────────────
    # COMPRESSION
    # ─────────────────────────────────────────────────────────────────────

    gzip: bool = False
    """Compress response bodies (gzip/deflate) when the client accepts it."""

    server_compression: bool = False
    """
    Set when a front-end server already compresses output.
    Compressing twice would corrupt the response, so the application
    then leaves bodies alone even with gzip enabled.
    """

    # ─────────────────────────────────────────────────────────────────────
    # URI RESOLUTION
    # ─────────────────────────────────────────────────────────────────────

    site_uri: str = ""
    """Explicit base URI, e.g. "https://example.com/app/". Empty = detect."""

    media_uri: str = ""
    """Explicit media URI: absolute ("https://cdn.example.com/") or a path ("/static")."""

    cgi_path_info_fixed: bool = True
    """
    Whether a CGI gateway strips PATH_INFO out of SCRIPT_NAME.
    When False (and the gateway is CGI), the base path comes from
    PHP_SELF instead of SCRIPT_NAME.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache style) or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # DEMO SERVER
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    port: int = 8080

    # Named runtime entries ("uri.base.full", ...), not settings.
    entries: Dict[str, Any] = field(default_factory=dict, repr=False)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a named entry, falling back to a setting of the same name.

            config.get("uri.base.full")
            config.get("charset")
        """
        if key in self.entries:
            return self.entries[key]
        if key in self.__dataclass_fields__ and key != "entries":
            return getattr(self, key)
        return default

    def set(self, key: str, value: Any) -> Any:
        """Store a named entry and return the previous value."""
        previous = self.entries.get(key)
        self.entries[key] = value
        return previous

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Create configuration from HTTPAPP_* environment variables.

        Usage:
            HTTPAPP_GZIP=1 HTTPAPP_SITE_URI=https://example.com/ python -m httpapp serve
        """
        return cls(
            charset=os.getenv("HTTPAPP_CHARSET", "utf-8"),
            mime_type=os.getenv("HTTPAPP_MIME_TYPE", "text/html"),
            http_version=os.getenv("HTTPAPP_HTTP_VERSION", "1.1"),
            cacheable=_env_flag("HTTPAPP_CACHEABLE", False),
            gzip=_env_flag("HTTPAPP_GZIP", False),
            server_compression=_env_flag("HTTPAPP_SERVER_GZIP", False),
            site_uri=os.getenv("HTTPAPP_SITE_URI", ""),
            media_uri=os.getenv("HTTPAPP_MEDIA_URI", ""),
            cgi_path_info_fixed=_env_flag("HTTPAPP_CGI_PATHINFO", True),
            log_level=os.getenv("HTTPAPP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTPAPP_LOG_FORMAT", "text"),
            host=os.getenv("HTTPAPP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTPAPP_PORT", "8080")),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid setting
        """
        if self.http_version not in ("1.0", "1.1", "2", "2.0", "3"):
            raise ValueError(f"Invalid http_version: {self.http_version!r}")

        if not self.charset.strip():
            raise ValueError("charset must not be empty")

        if "/" not in self.mime_type:
            raise ValueError(f"Invalid mime_type: {self.mime_type!r}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level!r}")

        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")
