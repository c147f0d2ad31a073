"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig
from minihttp.http import HTTPRequest, ResponseContext


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a query string."""
    return (
        b"GET /hello?name=Ada&age=36 HTTP/1.1\r\n"
        b"Host: localhost:35000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request; the body is never interpreted."""
    body = b'{"ignored": true}'
    return (
        b"POST /hellopost?name=Ada HTTP/1.1\r\n"
        b"Host: localhost:35000\r\n"
        b"Content-Type: application/json\r\n" +
        b"Content-Length: %d\r\n" % len(body) +
        b"\r\n"
    ) + body


@pytest.fixture
def config() -> ServerConfig:
    """Test server configuration on an ephemeral port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=8,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def webroot(tmp_path: Path) -> Path:
    """A small web root: index page, stylesheet, image and a sub-directory."""
    root = tmp_path / "webroot"
    (root / "styles").mkdir(parents=True)
    (root / "images").mkdir()
    (root / "docs").mkdir()

    (root / "index.html").write_text("<h1>index</h1>")
    (root / "styles" / "style.css").write_text("body { color: #333; }")
    (root / "images" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")
    (root / "images" / "photo.jpg").write_bytes(b"\xff\xd8\xff\xe0fake")
    (root / "docs" / "index.html").write_text("<h1>docs</h1>")
    (root / "notes.txt").write_text("plain notes")

    # Outside the root, for traversal checks
    (tmp_path / "secret.txt").write_text("top secret")

    return root


class RawResponse:
    """A response read off the wire: status code, lowercased headers, body."""

    def __init__(self, raw: bytes):
        self.raw = raw
        head, _, self.body = raw.partition(b"\r\n\r\n")
        lines = head.decode("latin-1").split("\r\n")
        self.status_line = lines[0]
        self.status_code = int(lines[0].split(" ", 2)[1])
        self.headers = {}
        for line in lines[1:]:
            name, _, value = line.partition(":")
            self.headers[name.strip().lower()] = value.strip()

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


class RawClient:
    """Talks to a server over plain sockets, one connection per request."""

    def __init__(self, address, timeout: float = 5.0):
        self.address = address
        self.timeout = timeout

    def request(self, method: str, target: str) -> RawResponse:
        data = (
            f"{method} {target} HTTP/1.1\r\n"
            f"Host: {self.address[0]}:{self.address[1]}\r\n"
            f"\r\n"
        ).encode()
        return RawResponse(self.send_raw(data))

    def get(self, target: str) -> RawResponse:
        return self.request("GET", target)

    def post(self, target: str) -> RawResponse:
        return self.request("POST", target)

    def request_raw(self, data: bytes) -> RawResponse:
        return RawResponse(self.send_raw(data))

    def send_raw(self, data: bytes) -> bytes:
        """Write raw bytes and read until the server closes."""
        with socket.create_connection(self.address, timeout=self.timeout) as sock:
            sock.sendall(data)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self):
        return self.server.address

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def test_server(config: ServerConfig, webroot: Path) -> Generator[TestServer, None, None]:
    """A running server with a few services and the webroot fixture."""
    config.static_base_dir = str(webroot.parent)
    server = HTTPServer(config)
    server.set_static_root("/webroot")

    @server.get("/hello")
    def hello(request: HTTPRequest, response: ResponseContext) -> str:
        return "hello " + request.get_value("name")

    @server.get("/echo")
    def echo(request: HTTPRequest, response: ResponseContext) -> str:
        return request.get_value("msg")

    @server.get("/boom")
    def boom(request: HTTPRequest, response: ResponseContext) -> str:
        raise RuntimeError("service exploded")

    @server.post("/hellopost")
    def hellopost(request: HTTPRequest, response: ResponseContext) -> str:
        return f"hello {request.get_value('name')} this is a simple post method example"

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def client(test_server: TestServer) -> RawClient:
    """Raw socket client pointed at the running test server."""
    return RawClient(test_server.address)


@pytest.fixture
def client_for():
    """RawClient factory for servers started inside a test."""
    return RawClient
