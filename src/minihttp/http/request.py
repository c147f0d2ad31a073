"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw header block read from a connection into an HTTPRequest.

Only the request line drives dispatch. Header lines are collected for
logging and for handlers that want them, but nothing here interprets them,
and request bodies are never read.

=============================================================================
REQUEST LINE
=============================================================================

    GET /hello?name=Ada HTTP/1.1\r\n
    ─┬─ ───────┬─────── ────┬───
     │         │            │
   method    target      version
               │
        ┌──────┴───────┐
        │              │
      path        raw query
     /hello        name=Ada

    The line must split on whitespace into exactly three tokens.
    The target is split on the FIRST "?":

        "/hello"             →  path="/hello",  query=None
        "/hello?"            →  path="/hello",  query=""
        "/a?x=1?y=2"         →  path="/a",      query="x=1?y=2"

    Neither part is percent-decoded. "/my%20page" stays "/my%20page"
    until the static resolver maps it onto the filesystem.

=============================================================================
FAILURE MODES
=============================================================================

    ┌──────────────────────────────────────┬─────────────────────────────┐
    │  Condition                           │  HTTPParseError status      │
    ├──────────────────────────────────────┼─────────────────────────────┤
    │  Header block over max_request_size  │  413 Payload Too Large      │
    │  Empty / blank request line          │  400 Bad Request            │
    │  Not exactly three tokens            │  400 Bad Request            │
    │  Version token not "HTTP/..."        │  400 Bad Request            │
    └──────────────────────────────────────┴─────────────────────────────┘

    The method token is NOT validated. Routing is verb-insensitive, so a
    "BREW /pot HTTP/1.1" request is dispatched like any other.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import re

from .query import get_value, parse_query


class HTTPParseError(Exception):
    """
    Raised when a request cannot be parsed.

    Carries the HTTP status the server answers with before closing the
    connection (400 for bad syntax, 413 for an oversized header block).
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request. Immutable once built.

    Attributes:
        method:         Request verb exactly as sent ("GET", "POST", ...)
        path:           Target path without the query string, not decoded
        query:          Raw query string after "?", or None if there was no "?"
        version:        Protocol token, e.g. "HTTP/1.1"
        headers:        Header name (lowercased) → value
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    path: str
    query: Optional[str] = None
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    client_address: Tuple[str, int] = ("", 0)

    @property
    def target(self) -> str:
        """The request target as it appeared on the request line."""
        if self.query is None:
            return self.path
        return f"{self.path}?{self.query}"

    @property
    def query_params(self) -> Dict[str, str]:
        """
        All query parameters, re-parsed on every access.

        Example:
            # GET /hello?name=Ada&age=36
            request.query_params  # {"name": "Ada", "age": "36"}
        """
        return parse_query(self.query)

    def get_value(self, name: str) -> str:
        """
        Get a query parameter's value, "" when missing.

        Never raises, also when the request had no query string at all.
        """
        return get_value(self.query, name)

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Parses raw request header blocks into HTTPRequest objects.

    One parser is shared by all worker threads; it holds no per-request
    state.

    Example:
        parser = RequestParser()
        request = parser.parse(b"GET /pi HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        request.path     # "/pi"
        request.query    # None
    """

    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 64 * 1024):
        """
        Args:
            max_request_size: Largest header block accepted, in bytes.
                              Bigger ones are rejected with 413.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse a request header block.

        Args:
            data: Bytes read from the connection, up to (and possibly
                  past) the blank line ending the headers.
            client_address: Peer (ip, port), copied onto the request.

        Returns:
            The parsed request.

        Raises:
            HTTPParseError: If the request line is malformed or the
                            block is too large.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request header block too large: {len(data)} bytes",
                status_code=413
            )

        # Anything after the blank line is body, which is not interpreted
        header_end = data.find(b"\r\n\r\n")
        if header_end != -1:
            data = data[:header_end]

        text = data.decode("latin-1")
        lines = text.replace("\r\n", "\n").split("\n")

        method, path, query, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            query=query,
            version=version,
            headers=headers,
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> Tuple[str, str, Optional[str], str]:
        """
        Split ``METHOD SP target SP version`` into its parts.

        Returns:
            (method, path, query, version)
        """
        tokens = line.split()
        if len(tokens) != 3:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = tokens

        if not version.startswith("HTTP/"):
            raise HTTPParseError(f"Invalid HTTP version: {version!r}")

        # str.partition keeps the rest intact: "/a?x=1?y=2" → ("/a", "x=1?y=2")
        path, sep, query = target.partition("?")

        return method, path, (query if sep else None), version

    def _parse_headers(self, lines: list) -> Dict[str, str]:
        """
        Collect ``Name: value`` lines into a lowercase-keyed dict.

        Repeated headers are joined with ", ". Lines that are not headers
        are skipped rather than rejected.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            if not line:
                break

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name = match.group(1).strip().lower()
            value = match.group(2).strip()

            if name in headers:
                headers[name] = f"{headers[name]}, {value}"
            else:
                headers[name] = value

        return headers


def parse_request(data: bytes, client_address: Tuple[str, int] = ("", 0)) -> HTTPRequest:
    """Parse a request header block with a default RequestParser."""
    return RequestParser().parse(data, client_address)
