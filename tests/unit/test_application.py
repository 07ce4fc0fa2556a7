"""
Unit tests for the WebApplication lifecycle.
"""

from datetime import timedelta
import gzip
import logging

import pytest

from httpapp.http.assembler import EXPIRED_DATE, NO_CACHE_CONTROL
from httpapp.http.redirect import InvalidRedirectStatus, RedirectStrategy
from httpapp.http.response import BodyStream, UnableToWriteBody, format_http_date


TRIDENT_UA = "Mozilla/5.0 (Windows NT 6.1; Trident/7.0; rv:11.0) like Gecko"


class TestExecute:
    """Tests for execute() and respond()."""

    def test_basic_response(self, make_app, transport):
        """Test status line, default headers and body."""
        make_app().execute()

        assert transport.status_line == "HTTP/1.1 200 OK"
        assert transport.status_code == 200
        assert transport.header("Content-Type") == "text/html; charset=utf-8"
        assert transport.header("Expires") == EXPIRED_DATE
        assert transport.header("Cache-Control") == NO_CACHE_CONTROL
        assert transport.header("Pragma") == "no-cache"
        assert transport.header("Status") is None
        assert transport.body == b"<p>hello</p>"

    def test_http_version(self, make_app, transport):
        make_app(http_version="1.0").execute()

        assert transport.status_line == "HTTP/1.0 200 OK"

    def test_cacheable(self, make_app, transport, frozen_now):
        """Test cache headers when the handler allows caching."""
        make_app(handler=lambda app: app.allow_cache(True)).execute()

        assert transport.header("Expires") == format_http_date(frozen_now + timedelta(seconds=900))
        assert transport.header("Pragma") is None

    def test_gzip(self, make_app, transport):
        """Test compression for a client that accepts gzip."""
        make_app(gzip=True).execute()

        assert transport.header("Content-Encoding") == "gzip"
        assert transport.header("Vary") == "Accept-Encoding"
        assert gzip.decompress(transport.body) == b"<p>hello</p>"

    def test_gzip_disabled_by_server_compression(self, make_app, transport):
        """Test that the application never compresses twice."""
        make_app(gzip=True, server_compression=True).execute()

        assert transport.header("Content-Encoding") is None
        assert transport.body == b"<p>hello</p>"

    def test_gzip_off_by_default(self, make_app, transport):
        make_app().execute()

        assert transport.header("Content-Encoding") is None

    def test_error_becomes_500(self, make_app, transport, caplog):
        """Test that handler errors are logged and turned into a 500."""
        def handler(app):
            raise RuntimeError("database is down")

        with caplog.at_level(logging.ERROR, logger="httpapp"):
            make_app(handler=handler).execute()

        assert transport.status_code == 500
        assert transport.status_line == "HTTP/1.1 500 Internal Server Error"
        assert "database is down" in caplog.text

    def test_handler_status(self, make_app, transport):
        """Test a handler setting its own Status header."""
        def handler(app):
            app.set_header("Status", "404", replace=True)
            app.set_body("missing")

        make_app(handler=handler).execute()

        assert transport.status_line == "HTTP/1.1 404 Not Found"
        assert transport.body == b"missing"

    def test_access_log(self, make_app, caplog):
        """Test one access log line per response."""
        with caplog.at_level(logging.INFO, logger="httpapp.access"):
            make_app().execute()

        records = [r for r in caplog.records if r.name == "httpapp.access"]
        assert len(records) == 1
        assert '"http://example.com/app/index.php/foo" 200 12' in records[0].getMessage()


class TestHeaders:
    """Tests for header operations on the application."""

    def test_chaining_and_listing(self, make_app):
        app = make_app().set_header("X-One", 1).set_header("X-Two", "2")

        assert app.get_headers() == [
            {"name": "X-One", "value": "1"},
            {"name": "X-Two", "value": "2"},
        ]

    def test_clear_headers(self, make_app):
        app = make_app().set_header("X-One", "1").clear_headers()

        assert app.get_headers() == []

    def test_multiple_values_transmitted(self, make_app, transport):
        """Test that every value of a header reaches the transport."""
        def handler(app):
            app.set_header("Vary", "Cookie").set_header("Vary", "Origin")

        make_app(handler=handler).execute()

        assert [v for n, v in transport.headers if n == "Vary"] == ["Cookie", "Origin"]

    def test_send_headers_once(self, make_app, transport):
        """Test that sending after commit is a no-op, not an error."""
        app = make_app()
        app.send_headers()
        transport.write(b"x")

        app.set_header("X-Late", "1").send_headers()

        assert transport.header("X-Late") is None


class TestBody:
    """Tests for body operations."""

    def test_set_append_prepend(self, make_app):
        app = make_app()
        app.set_body("b").append_body(b"c").prepend_body("a")

        assert app.get_body() == b"abc"

    def test_charset_encoding(self, make_app):
        """Test that text is encoded with the configured charset."""
        app = make_app(charset="iso-8859-1")
        app.set_body("café")

        assert app.get_body() == "café".encode("iso-8859-1")

    def test_append_to_read_only_stream(self, make_app):
        """Test that a read-only body is rebuilt instead of written."""
        app = make_app()
        app.response.set_body(BodyStream(b"abc", writable=False))
        app.append_body("def")

        assert app.get_body() == b"abcdef"

    def test_append_to_detached_stream(self, make_app):
        """Test that a stream that is neither readable nor writable fails."""
        app = make_app()
        stream = BodyStream(b"abc", readable=False, writable=False)
        app.response.set_body(stream)

        with pytest.raises(UnableToWriteBody):
            app.append_body("x")
        assert app.response.body is stream

    def test_prepend_to_unreadable_stream(self, make_app):
        app = make_app()
        app.response.set_body(BodyStream(b"abc", readable=False))

        with pytest.raises(UnableToWriteBody):
            app.prepend_body("x")


class TestUris:
    """Tests for URI resolution through the application."""

    def test_entries_published(self, make_app):
        app = make_app()

        assert app.get("uri.request") == "http://example.com/app/index.php/foo"
        assert app.get("uri.base.full") == "http://example.com/app/"
        assert app.get("uri.base.host") == "http://example.com"
        assert app.get("uri.base.path") == "/app/"
        assert app.get("uri.route") == "index.php/foo"
        assert app.get("uri.media.full") == "http://example.com/app/media/"
        assert app.get("uri.media.path") == "/app/media/"

    def test_reload_with_request_uri(self, make_app):
        """Test that a reload replaces the entries, including a stale route."""
        app = make_app()

        app.load_system_uris("http://example.com/app/articles")
        assert app.get("uri.route") == "articles"

        app.load_system_uris("http://other.example/")
        assert app.get("uri.route") is None

    def test_site_uri_setting(self, make_app):
        app = make_app(site_uri="https://www.example.org/")

        assert app.get("uri.base.full") == "https://www.example.org/"

    def test_ssl(self, make_app, origin_env):
        origin_env["HTTPS"] = "on"
        app = make_app(environment=origin_env)

        assert app.is_ssl_connection()
        assert app.get("uri.base.full") == "https://example.com/app/"

    def test_get_and_set(self, make_app):
        app = make_app()

        assert app.set("custom", 1) is None
        assert app.get("custom") == 1
        assert app.get("nothing", "default") == "default"


class TestRedirect:
    """Tests for redirect()."""

    def test_header_redirect(self, make_app, transport):
        """Test the normal Status + Location redirect."""
        app = make_app()
        action = app.redirect("/login")

        assert action.strategy is RedirectStrategy.HEADER
        assert transport.status_line == "HTTP/1.1 303 See other"
        assert transport.status_code == 303
        assert transport.header("Location") == "http://example.com/login"
        assert app.closed

    def test_permanent_redirect(self, make_app, transport):
        make_app().redirect("index.php?view=new", 301)

        assert transport.status_line == "HTTP/1.1 301 Moved Permanently"
        assert transport.header("Location") == "http://example.com/app/index.php?view=new"

    def test_redirect_from_handler(self, make_app, transport):
        """Test that execute() does not respond twice after a redirect."""
        def handler(app):
            app.redirect("/login")

        make_app(handler=handler).execute()

        assert transport.status_code == 303
        assert transport.body == b""

    def test_boolean_status_warns_at_call_site(self, make_app, transport):
        """Test that the deprecation names the caller of redirect()."""
        app = make_app()

        with pytest.warns(DeprecationWarning) as record:
            app.redirect("/login", True)

        assert record[0].filename == __file__
        assert transport.status_code == 301

    def test_invalid_status_changes_nothing(self, make_app, transport):
        app = make_app()

        with pytest.raises(InvalidRedirectStatus):
            app.redirect("/login", "teapot")

        assert not app.response.has_header("Location")
        assert not transport.headers_sent()
        assert not app.closed

    def test_script_redirect_after_commit(self, make_app, transport):
        """Test the script fallback once headers are on the wire."""
        app = make_app()
        app.send_headers()
        transport.write(b"<p>partial</p>")

        action = app.redirect("/login")

        assert action.strategy is RedirectStrategy.SCRIPT
        assert transport.body.startswith(b"<p>partial</p><script>document.location.href=")
        assert transport.header("Location") is None

    def test_html_document_for_trident(self, make_app, origin_env, transport):
        """Test the legacy fallback for old Internet Explorer."""
        origin_env["HTTP_USER_AGENT"] = TRIDENT_UA
        app = make_app(environment=origin_env)

        action = app.redirect("/café")

        assert action.strategy is RedirectStrategy.HTML_DOCUMENT
        assert transport.body.startswith(b"<html><head><meta http-equiv=")
        assert transport.header("Location") is None


class TestStaticHelpers:
    """Tests for the status and ASCII helpers."""

    def test_is_valid_http_status(self, make_app):
        app = make_app()

        assert app.is_valid_http_status(404)
        assert app.is_valid_http_status("303")
        assert not app.is_valid_http_status(499)

    def test_is_ascii(self, make_app):
        assert make_app().is_ascii("/plain")
        assert not make_app().is_ascii("/café")
