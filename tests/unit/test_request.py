"""
Unit tests for HTTP request parsing.
"""

import dataclasses

import pytest

from minihttp.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/hello"
        assert request.query == "name=Ada&age=36"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are collected with lowercase names."""
        request = parse_request(sample_get_request)

        assert request.headers["host"] == "localhost:35000"
        assert request.get_header("User-Agent") == "pytest"
        assert request.get_header("X-Missing", "none") == "none"

    def test_post_body_is_not_interpreted(self, sample_post_request: bytes):
        """Test that a POST parses like any other request line."""
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/hellopost"
        assert request.get_value("name") == "Ada"
        assert request.get_header("content-type") == "application/json"

    def test_no_query_string(self):
        """Test that a target without "?" has no query at all."""
        request = parse_request(b"GET /pi HTTP/1.1\r\n\r\n")

        assert request.path == "/pi"
        assert request.query is None
        assert request.get_value("anything") == ""

    def test_empty_query_string(self):
        """Test that a trailing "?" gives an empty query."""
        request = parse_request(b"GET /pi? HTTP/1.1\r\n\r\n")

        assert request.path == "/pi"
        assert request.query == ""

    def test_split_on_first_question_mark(self):
        """Test that only the first "?" separates path and query."""
        request = parse_request(b"GET /a?x=1?y=2 HTTP/1.1\r\n\r\n")

        assert request.path == "/a"
        assert request.query == "x=1?y=2"
        assert request.get_value("x") == "1?y=2"

    def test_path_is_not_decoded(self):
        """Test that percent-escapes are left alone."""
        request = parse_request(b"GET /my%20page?q=a%20b HTTP/1.1\r\n\r\n")

        assert request.path == "/my%20page"
        assert request.get_value("q") == "a%20b"

    def test_bare_lf_line_endings(self):
        """Test that LF-only requests still parse."""
        request = parse_request(b"GET /hello?name=Ada HTTP/1.0\nHost: x\n\n")

        assert request.path == "/hello"
        assert request.version == "HTTP/1.0"
        assert request.get_header("host") == "x"

    def test_unknown_method_is_accepted(self):
        """Test that the method token is not validated."""
        request = parse_request(b"BREW /pot HTTP/1.1\r\n\r\n")

        assert request.method == "BREW"
        assert request.path == "/pot"

    def test_invalid_request_line(self):
        """Test that a request line without three tokens is rejected."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GARBAGE\r\n\r\n")

        assert exc_info.value.status_code == 400

    def test_too_many_tokens(self):
        """Test that four tokens are rejected."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET /a b HTTP/1.1\r\n\r\n")

        assert exc_info.value.status_code == 400

    def test_empty_request(self):
        """Test that an empty request line is rejected."""
        with pytest.raises(HTTPParseError):
            parse_request(b"\r\n\r\n")

    def test_invalid_version(self):
        """Test that the version token must look like HTTP/x."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / FTP/1.0\r\n\r\n")

        assert exc_info.value.status_code == 400

    def test_request_too_large(self):
        """Test that oversized header blocks are rejected with 413."""
        parser = RequestParser(max_request_size=100)
        data = b"GET / HTTP/1.1\r\nX-Padding: " + b"x" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(data)

        assert exc_info.value.status_code == 413

    def test_duplicate_headers_are_joined(self):
        """Test that repeated headers are combined."""
        request = parse_request(
            b"GET / HTTP/1.1\r\nAccept: text/html\r\nAccept: text/css\r\n\r\n"
        )

        assert request.get_header("accept") == "text/html, text/css"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_request_is_immutable(self):
        """Test that a parsed request cannot be modified."""
        request = HTTPRequest(method="GET", path="/hello", query="name=Ada")

        with pytest.raises(dataclasses.FrozenInstanceError):
            request.path = "/other"

    def test_target(self):
        """Test rebuilding the request target."""
        assert HTTPRequest(method="GET", path="/a").target == "/a"
        assert HTTPRequest(method="GET", path="/a", query="x=1").target == "/a?x=1"

    def test_get_value(self):
        """Test query lookups through the request."""
        request = HTTPRequest(method="GET", path="/hello", query="name=Ada&age=36")

        assert request.get_value("name") == "Ada"
        assert request.get_value("age") == "36"
        assert request.get_value("missing") == ""

    def test_get_value_without_query(self):
        """Test that lookups on a request without a query return ""."""
        request = HTTPRequest(method="GET", path="/hello", query=None)

        assert request.get_value("name") == ""
        assert request.query_params == {}

    def test_query_params_not_cached(self):
        """Test that every access returns a fresh mapping."""
        request = HTTPRequest(method="GET", path="/", query="a=1")

        first = request.query_params
        first["a"] = "changed"

        assert request.query_params == {"a": "1"}
