"""
Unit tests for the access log.
"""

import json
import logging

from minihttp.access_log import AccessLogger
from minihttp.http.request import HTTPRequest
from minihttp.http.response import HTTPResponse, internal_error


CLIENT = ("127.0.0.1", 54321)


def make_request() -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path="/hello",
        query="name=Ada",
        headers={"user-agent": "pytest"},
        client_address=CLIENT,
    )


class TestAccessLogger:
    """Tests for AccessLogger class."""

    def test_text_line(self, caplog):
        caplog.set_level(logging.INFO, logger="minihttp.access")
        response = HTTPResponse(body=b"hello Ada")

        entry = AccessLogger().log("abc123", make_request(), response, CLIENT, 1.234)

        assert entry.status_code == 200
        assert entry.content_length == 9
        assert '"GET /hello?name=Ada" 200 9 1.23ms' in caplog.text
        assert caplog.records[-1].levelno == logging.INFO

    def test_json_line(self, caplog):
        caplog.set_level(logging.INFO, logger="minihttp.access")

        AccessLogger("json").log("abc123", make_request(), HTTPResponse(), CLIENT, 0.5)

        record = json.loads(caplog.records[-1].getMessage())
        assert record["request_id"] == "abc123"
        assert record["path"] == "/hello"
        assert record["user_agent"] == "pytest"
        assert record["client_ip"] == "127.0.0.1"

    def test_server_errors_are_warnings(self, caplog):
        caplog.set_level(logging.INFO, logger="minihttp.access")

        AccessLogger().log("abc123", make_request(), internal_error(), CLIENT, 0.5)

        assert caplog.records[-1].levelno == logging.WARNING

    def test_unparsed_request(self):
        """Test entries for requests that never parsed."""
        entry = AccessLogger().build_entry("abc123", None, HTTPResponse(status=400), CLIENT, 0.1)

        assert entry.method == "-"
        assert entry.path == "-"
        assert entry.user_agent == "-"
        assert entry.status_code == 400
