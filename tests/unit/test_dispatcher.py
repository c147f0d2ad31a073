"""
Unit tests for request dispatch.
"""

import json
from pathlib import Path

import pytest

from minihttp.handlers.static import StaticResolver
from minihttp.http.dispatcher import Dispatcher, to_body
from minihttp.http.request import HTTPRequest
from minihttp.http.router import RouteTable
from minihttp.http.status_codes import HTTPStatus


def make_request(path: str, query=None, method: str = "GET") -> HTTPRequest:
    return HTTPRequest(method=method, path=path, query=query)


@pytest.fixture
def routes() -> RouteTable:
    table = RouteTable()
    table.register("/hello", lambda req, resp: "hello " + req.get_value("name"))
    return table


@pytest.fixture
def dispatcher(routes: RouteTable, webroot: Path) -> Dispatcher:
    return Dispatcher(routes, StaticResolver("/webroot", base_dir=webroot.parent))


class TestDispatcher:
    """Tests for Dispatcher class."""

    def test_service_response(self, dispatcher: Dispatcher):
        """Test a registered service with the default framing."""
        response = dispatcher.dispatch(make_request("/hello", "name=Ada"))

        assert response.status == 200
        assert response.content_type == "application/json"
        assert response.body == b"hello Ada"

    def test_service_with_prefix(self, dispatcher: Dispatcher):
        """Test that /app/<x> reaches the service at /<x>."""
        response = dispatcher.dispatch(make_request("/app/hello", "name=Ada"))

        assert response.body == b"hello Ada"

    def test_prefix_alone_is_not_a_route(self, dispatcher: Dispatcher):
        """Test that "/app" itself is not stripped."""
        assert dispatcher.find_route("/app") is None
        assert dispatcher.find_route("/apphello") is None

    def test_exact_route_beats_prefix(self, routes: RouteTable, dispatcher: Dispatcher):
        """Test that a route registered with the prefix wins."""
        routes.register("/app/hello", lambda req, resp: "prefixed")

        assert dispatcher.dispatch(make_request("/app/hello")).body == b"prefixed"

    def test_prefix_disabled(self, routes: RouteTable):
        """Test an empty service prefix."""
        dispatcher = Dispatcher(routes, service_prefix="")

        assert dispatcher.dispatch(make_request("/app/hello")).status == 404

    def test_route_beats_static_file(self, routes: RouteTable, dispatcher: Dispatcher):
        """Test that a service shadows a file with the same path."""
        routes.register("/index.html", lambda req, resp: "from service")

        response = dispatcher.dispatch(make_request("/index.html"))

        assert response.body == b"from service"
        assert response.content_type == "application/json"

    def test_static_fallback(self, dispatcher: Dispatcher):
        """Test that unregistered paths are served from the web root."""
        response = dispatcher.dispatch(make_request("/styles/style.css"))

        assert response.status == 200
        assert response.content_type == "text/css"
        assert response.body == b"body { color: #333; }"

    def test_not_found(self, dispatcher: Dispatcher):
        """Test the 404 body."""
        response = dispatcher.dispatch(make_request("/missing.html"))

        assert response.status == 404
        assert json.loads(response.body) == {"error": "404 Not Found: /missing.html"}

    def test_not_found_without_static(self, routes: RouteTable):
        """Test 404 when no web root is configured."""
        dispatcher = Dispatcher(routes)

        assert dispatcher.dispatch(make_request("/index.html")).status == 404

    def test_traversal_is_not_found(self, dispatcher: Dispatcher):
        """Test that escaping the web root is a plain 404."""
        assert dispatcher.dispatch(make_request("/../secret.txt")).status == 404

    def test_service_exception_is_500(self, routes: RouteTable, dispatcher: Dispatcher, caplog):
        """Test that a failing service is contained and logged."""
        def boom(req, resp):
            raise RuntimeError("service exploded")

        routes.register("/boom", boom)

        response = dispatcher.dispatch(make_request("/boom"))

        assert response.status == 500
        assert "service exploded" in caplog.text

    def test_context_is_honored(self, routes: RouteTable, dispatcher: Dispatcher):
        """Test status, content type and headers set by a service."""
        def created(req, resp):
            resp.set_status(HTTPStatus.CREATED).set_content_type("text/plain")
            resp.set_header("X-Trace", "abc")
            return "made"

        routes.register("/make", created, method="POST")

        response = dispatcher.dispatch(make_request("/make", method="POST"))

        assert response.status == 201
        assert response.content_type == "text/plain"
        assert response.headers["X-Trace"] == "abc"
        assert response.body == b"made"

    def test_verb_is_not_checked(self, routes: RouteTable, dispatcher: Dispatcher):
        """Test that a GET service also answers other verbs."""
        response = dispatcher.dispatch(make_request("/hello", "name=Bo", method="POST"))

        assert response.body == b"hello Bo"

    def test_unreadable_file_is_500(self, routes: RouteTable, webroot: Path, monkeypatch):
        """Test that an I/O failure on a static file gives 500."""
        static = StaticResolver("/webroot", base_dir=webroot.parent)
        dispatcher = Dispatcher(routes, static)

        def fail(path):
            raise PermissionError("denied")

        monkeypatch.setattr(static, "resolve", fail)

        assert dispatcher.dispatch(make_request("/index.html")).status == 500


class TestToBody:
    """Tests for to_body()."""

    def test_str(self):
        assert to_body("héllo") == "héllo".encode("utf-8")

    def test_bytes_pass_through(self):
        assert to_body(b"\x00\x01") == b"\x00\x01"

    def test_none_is_empty(self):
        assert to_body(None) == b""

    def test_other_values_use_str(self):
        assert to_body(3.14) == b"3.14"
