"""
Unit tests for access logging.
"""

import json
import logging

from httpapp.access_log import AccessLogger, ResponseLog


class TestAccessLogger:
    """Tests for AccessLogger output formats."""

    def test_text_format(self, caplog):
        """Test the Apache-style line."""
        access = AccessLogger()

        with caplog.at_level(logging.INFO, logger="httpapp.access"):
            entry = access.log("http://example.com/app/", 303, 0, access.start())

        assert isinstance(entry, ResponseLog)
        assert entry.status_code == 303
        assert len(caplog.records) == 1
        assert '"http://example.com/app/" 303 0' in caplog.records[0].getMessage()

    def test_json_format(self, caplog):
        """Test the machine-readable line."""
        access = AccessLogger(log_format="json")

        with caplog.at_level(logging.INFO, logger="httpapp.access"):
            access.log("http://example.com/", 200, 42, access.start(), content_encoding="gzip")

        data = json.loads(caplog.records[0].getMessage())
        assert data["status_code"] == 200
        assert data["content_length"] == 42
        assert data["content_encoding"] == "gzip"
        assert len(data["request_id"]) == 8

    def test_level(self, caplog):
        """Test that entries below the captured level are not emitted."""
        access = AccessLogger(log_level=logging.DEBUG)

        with caplog.at_level(logging.INFO, logger="httpapp.access"):
            access.log("http://example.com/", 200, 0, access.start())

        assert caplog.records == []


class TestResponseLog:
    """Tests for ResponseLog rendering."""

    def test_to_dict_rounds_duration(self):
        entry = ResponseLog("abcd1234", "/", 200, 5, "", 1.23456, "ts")

        assert entry.to_dict()["duration_ms"] == 1.23

    def test_to_text(self):
        entry = ResponseLog("abcd1234", "http://x/", 404, 9, "", 2.0, "18/Oct/2026:10:00:00 +0000")

        assert entry.to_text() == '[18/Oct/2026:10:00:00 +0000] "http://x/" 404 9 2.00ms'
