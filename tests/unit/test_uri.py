"""
Unit tests for system URI resolution.
"""

import pytest

from httpapp.http.uri import ServerEnvironment, UriResolver, dirname, split_uri


@pytest.fixture
def resolver() -> UriResolver:
    return UriResolver()


def resolve(resolver, variables, **options):
    return resolver.load_system_uris(ServerEnvironment(variables), **options)


class TestServerEnvironment:
    """Tests for the server variable view."""

    def test_missing_reads_empty(self):
        """Test that missing and None values read as the default."""
        env = ServerEnvironment({"EMPTY": None})

        assert env.get("MISSING") == ""
        assert env.get("EMPTY", "x") == "x"
        assert "EMPTY" in env

    def test_values_are_strings(self):
        """Test that non-string values are converted."""
        assert ServerEnvironment({"SERVER_PORT": 8080}).get("SERVER_PORT") == "8080"


class TestHelpers:
    """Tests for split_uri and dirname."""

    def test_split_uri(self):
        """Test host prefix and path extraction."""
        assert split_uri("http://user:pw@example.com:8080/a/b?x=1") == ("http://user:pw@example.com:8080", "/a/b")
        assert split_uri("https://example.com") == ("https://example.com", "")

    def test_split_uri_unparseable(self):
        """Test that a broken IPv6 host yields empty parts."""
        assert split_uri("http://[::1/index.php") == ("", "")

    @pytest.mark.parametrize("path,expected", [
        ("/app/index.php", "/app"),
        ("/a/b/index.php", "/a/b"),
        ("/index.php", "/"),
        ("index.php", "."),
        ("/app/", "/"),
        ("", ""),
    ])
    def test_dirname(self, path, expected):
        """Test directory extraction from script paths."""
        assert dirname(path) == expected


class TestSslDetection:
    """Tests for is_ssl_connection."""

    def test_https_on(self, resolver):
        assert resolver.is_ssl_connection(ServerEnvironment({"HTTPS": "on"}))

    def test_https_off(self, resolver):
        assert not resolver.is_ssl_connection(ServerEnvironment({"HTTPS": "OFF"}))

    def test_forwarded_proto(self, resolver):
        """Test detection behind a TLS-terminating proxy."""
        assert resolver.is_ssl_connection(ServerEnvironment({"HTTP_X_FORWARDED_PROTO": "HTTPS"}))
        assert not resolver.is_ssl_connection(ServerEnvironment({"HTTP_X_FORWARDED_PROTO": "http"}))

    def test_nothing_set(self, resolver):
        assert not resolver.is_ssl_connection(ServerEnvironment())


class TestDetectRequestUri:
    """Tests for rebuilding the request URI."""

    def test_origin_server_style(self, resolver, origin_env):
        """Test REQUEST_URI being used as-is."""
        uri = resolver.detect_request_uri(ServerEnvironment(origin_env))
        assert uri == "http://example.com/app/index.php/foo"

    def test_gateway_style(self, resolver, gateway_env):
        """Test SCRIPT_NAME + QUERY_STRING without REQUEST_URI."""
        uri = resolver.detect_request_uri(ServerEnvironment(gateway_env))
        assert uri == "http://example.com/app/index.php?a=1"

    def test_gateway_style_without_query(self, resolver):
        """Test that no '?' is added for an empty query string."""
        env = ServerEnvironment({"HTTP_HOST": "example.com", "SCRIPT_NAME": "/index.php"})
        assert resolver.detect_request_uri(env) == "http://example.com/index.php"

    def test_request_uri_without_php_self(self, resolver):
        """Test that REQUEST_URI alone falls back to gateway style."""
        env = ServerEnvironment({
            "HTTP_HOST": "example.com",
            "SCRIPT_NAME": "/index.php",
            "REQUEST_URI": "/index.php/ignored",
        })
        assert resolver.detect_request_uri(env) == "http://example.com/index.php"

    def test_https_scheme(self, resolver, origin_env):
        origin_env["HTTPS"] = "on"
        uri = resolver.detect_request_uri(ServerEnvironment(origin_env))
        assert uri.startswith("https://example.com/")

    def test_unsafe_characters_escaped(self, resolver, origin_env):
        """Test quote and angle-bracket escaping."""
        origin_env["REQUEST_URI"] = "/app/index.php?q=<script>'\""
        uri = resolver.detect_request_uri(ServerEnvironment(origin_env))

        assert uri == "http://example.com/app/index.php?q=%3Cscript%3E%27%22"

    def test_whitespace_trimmed(self, resolver, origin_env):
        origin_env["REQUEST_URI"] = "/app/index.php "
        assert resolver.detect_request_uri(ServerEnvironment(origin_env)) == "http://example.com/app/index.php"


class TestLoadSystemUris:
    """Tests for base, route and media resolution."""

    def test_origin_server(self, resolver, origin_env):
        """Test the full set of URIs for an app mounted at /app."""
        uris = resolve(resolver, origin_env)

        assert uris.request == "http://example.com/app/index.php/foo"
        assert uris.base_host == "http://example.com"
        assert uris.base_path == "/app/"
        assert uris.base_full == "http://example.com/app/"
        assert uris.route == "index.php/foo"
        assert uris.media_full == "http://example.com/app/media/"
        assert uris.media_path == "/app/media/"

    def test_gateway(self, resolver, gateway_env):
        uris = resolve(resolver, gateway_env)

        assert uris.base_full == "http://example.com/app/"
        assert uris.route == "index.php?a=1"

    def test_mounted_at_root(self, resolver):
        """Test that the base path of a root install is '/'."""
        uris = resolve(resolver, {
            "HTTP_HOST": "example.com",
            "SCRIPT_NAME": "/index.php",
            "PHP_SELF": "/index.php",
            "REQUEST_URI": "/index.php?x=1",
        })

        assert uris.base_path == "/"
        assert uris.base_full == "http://example.com/"
        assert uris.route == "index.php?x=1"

    def test_explicit_request_uri(self, resolver, origin_env):
        """Test that an explicit request URI skips detection."""
        uris = resolve(resolver, origin_env, request_uri="http://example.com/app/articles")

        assert uris.request == "http://example.com/app/articles"
        assert uris.route == "articles"

    def test_site_uri_override(self, resolver, origin_env):
        """Test a pinned base URI, with the front controller removed."""
        uris = resolve(resolver, origin_env, site_uri="https://www.example.org/site/index.php")

        assert uris.base_host == "https://www.example.org"
        assert uris.base_path == "/site/"
        assert uris.base_full == "https://www.example.org/site/"
        assert uris.route is None
        assert uris.media_full == "https://www.example.org/site/media/"

    def test_front_controller_removed_once(self, resolver, origin_env):
        """Test that only the first index.php in a site URI is removed."""
        uris = resolve(resolver, origin_env, site_uri="http://x.org/index.php/sub/index.php/")

        assert uris.base_path == "//sub/index.php/"
        assert uris.base_full == "http://x.org//sub/index.php/"

    def test_blank_site_uri_ignored(self, resolver, origin_env):
        """Test that whitespace-only overrides count as unset."""
        uris = resolve(resolver, origin_env, site_uri="   ", media_uri=" ")

        assert uris.base_full == "http://example.com/app/"
        assert uris.media_path == "/app/media/"

    def test_route_match_ignores_case(self, resolver):
        """Test that the base URI prefix is compared case-insensitively."""
        uris = resolve(
            resolver, {},
            request_uri="http://EXAMPLE.com/APP/articles",
            site_uri="http://example.com/app/",
        )

        assert uris.route == "articles"

    def test_relative_media_uri(self, resolver, origin_env):
        """Test a media path override."""
        uris = resolve(resolver, origin_env, media_uri="/static/")

        assert uris.media_path == "/static/"
        assert uris.media_full == "http://example.com/static/"

    def test_absolute_media_uri(self, resolver, origin_env):
        """Test a media URI on another host."""
        uris = resolve(resolver, origin_env, media_uri="https://cdn.example.net/m/")

        assert uris.media_full == "https://cdn.example.net/m/"
        assert uris.media_path == "https://cdn.example.net/m/"

    def test_cgi_uses_php_self(self, resolver):
        """Test the base path for a CGI gateway that keeps PATH_INFO in the script path."""
        env = {
            "GATEWAY_INTERFACE": "CGI/1.1",
            "HTTP_HOST": "example.com",
            "SCRIPT_NAME": "/other/index.php",
            "PHP_SELF": "/cgi/index.php/extra",
            "REQUEST_URI": "/cgi/index.php/extra",
        }

        assert resolve(resolver, env, cgi_path_info_fixed=False).base_path == "/cgi/"
        assert resolve(resolver, env, cgi_path_info_fixed=True).base_path == "/other/"

    def test_base_invariants(self, resolver, origin_env):
        """Test that base_full is host + path and the path ends in '/'."""
        uris = resolve(resolver, origin_env)

        assert uris.base_full == uris.base_host + uris.base_path
        assert uris.base_path.endswith("/")


class TestResolvedUris:
    """Tests for the published entries."""

    def test_entries(self, resolver, origin_env):
        entries = resolve(resolver, origin_env).as_entries()

        assert list(entries) == [
            "uri.request",
            "uri.base.full",
            "uri.base.host",
            "uri.base.path",
            "uri.route",
            "uri.media.full",
            "uri.media.path",
        ]

    def test_route_omitted_when_unmatched(self, resolver, origin_env):
        entries = resolve(resolver, origin_env, site_uri="https://other.example/").as_entries()

        assert "uri.route" not in entries
