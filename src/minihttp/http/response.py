"""
=============================================================================
HTTP RESPONSE FRAMING
=============================================================================

Builds the bytes written back on a connection.

Every response this server sends has the same shape:

    HTTP/1.1 200 OK\r\n                     ← status line
    Content-Type: application/json\r\n      ← from handler context / MIME table
    Content-Length: 9\r\n                   ← always exact body length
    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n
    Server: minihttp/1.0\r\n
    Connection: close\r\n                   ← one response per connection
    \r\n
    hello Ada                               ← body bytes

Two kinds of object live here:

    ResponseContext   Mutable, handed to a service so it can pick a status,
                      content type or extra headers for its reply.

    HTTPResponse      The final status + headers + body, serialized by
                      to_bytes() once the dispatcher is done.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Union
import json

from .mime_types import DEFAULT_SERVICE_TYPE
from .status_codes import HTTPStatus


def reason_phrase(status: int) -> str:
    """Reason phrase for any integer status; "Unknown" for unlisted codes."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"


@dataclass
class ResponseContext:
    """
    What a service may change about its own response.

    A fresh context is created for every dispatched request. Left
    untouched, the reply is framed as ``200`` with ``application/json``.

    Example:
        def create_item(request, response):
            response.set_status(HTTPStatus.CREATED).set_content_type("text/plain")
            return "created"
    """

    status: int = HTTPStatus.OK
    content_type: str = DEFAULT_SERVICE_TYPE
    headers: Dict[str, str] = field(default_factory=dict)

    def set_status(self, status: int) -> "ResponseContext":
        self.status = status
        return self

    def set_content_type(self, content_type: str) -> "ResponseContext":
        self.content_type = content_type
        return self

    def set_header(self, name: str, value: str) -> "ResponseContext":
        """Add an extra header. Content-Type set here wins over content_type."""
        self.headers[name] = value
        return self


@dataclass
class HTTPResponse:
    """
    A complete response, ready to be serialized.

    to_bytes() always writes Content-Length and ``Connection: close``, and
    adds Date and Server unless already present in headers.
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @classmethod
    def from_context(cls, context: ResponseContext, body: Union[str, bytes]) -> "HTTPResponse":
        """Frame a service's return value with whatever its context holds."""
        response = cls(status=context.status)
        response.set_header("Content-Type", context.content_type)
        for name, value in context.headers.items():
            response.set_header(name, value)
        return response.set_body(body)

    @property
    def status_line(self) -> str:
        """e.g. ``HTTP/1.1 404 Not Found``"""
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    @property
    def content_type(self) -> str:
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value
        return ""

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header, replacing any existing one whatever its case."""
        for existing in [h for h in self.headers if h.lower() == name.lower()]:
            del self.headers[existing]
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body; strings are encoded as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def to_bytes(self, server_name: str = "minihttp") -> bytes:
        """
        Serialize status line, headers, blank line and body.

        Args:
            server_name: Value of the Server header.

        Returns:
            The complete response, ready for socket.sendall().
        """
        # Framing headers are ours, whatever case the caller used
        response_headers = {
            name: value for name, value in self.headers.items()
            if name.lower() not in ("content-length", "connection")
        }
        present = {name.lower() for name in response_headers}

        # Content-Length always reflects the body actually sent
        response_headers["Content-Length"] = str(len(self.body))
        if "date" not in present:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))
        if "server" not in present:
            response_headers["Server"] = server_name
        response_headers["Connection"] = "close"

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"
        return header_bytes + self.body


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an HTTP-date (RFC 7231).

    Example: ``Mon, 19 Oct 2026 12:00:00 GMT``
    """
    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CANNED RESPONSES
# =============================================================================
#
# Every error the server produces on its own is a small JSON object:
#
#     {"error": "404 Not Found: /missing.html"}
#
# =============================================================================

def error_response(status: int, message: str) -> HTTPResponse:
    """Build a JSON error response with body ``{"error": message}``."""
    return (HTTPResponse(status=status)
            .set_header("Content-Type", "application/json")
            .set_body(json.dumps({"error": message})))


def file_response(content: bytes, content_type: str) -> HTTPResponse:
    """200 OK carrying a static file's bytes."""
    return (HTTPResponse(status=HTTPStatus.OK)
            .set_header("Content-Type", content_type)
            .set_body(content))


def not_found(path: str) -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND, f"404 Not Found: {path}")


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)


def service_unavailable(message: str = "Server is overloaded") -> HTTPResponse:
    return error_response(HTTPStatus.SERVICE_UNAVAILABLE, message)
