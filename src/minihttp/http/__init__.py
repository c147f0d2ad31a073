"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between "bytes arrived on a socket" and "bytes to send back".

    raw header block
          │
          ▼
    ┌─────────────────┐      ┌──────────────┐
    │ request.py      │─────►│ query.py     │  name=Ada&age=36 → {...}
    │ RequestParser   │      └──────────────┘
    └─────────────────┘
          │ HTTPRequest
          ▼
    ┌─────────────────┐      ┌──────────────┐
    │ dispatcher.py   │─────►│ router.py    │  exact path → Service
    │ Dispatcher      │      └──────────────┘
    │                 │      ┌──────────────────────┐
    │                 │─────►│ handlers/static.py   │  path → file bytes
    └─────────────────┘      └──────────────────────┘
          │ HTTPResponse           │
          ▼                        ▼
    ┌─────────────────┐      ┌──────────────┐
    │ response.py     │      │ mime_types.py│  .css → text/css
    │ to_bytes()      │      └──────────────┘
    └─────────────────┘
          │
          ▼
    b"HTTP/1.1 200 OK\\r\\n..."

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .query import parse_query, get_value
from .response import (
    HTTPResponse,
    ResponseContext,
    error_response,
    not_found,
    internal_error,
    service_unavailable,
)
from .router import Route, RouteTable, Service, FunctionService
from .dispatcher import Dispatcher
from .status_codes import HTTPStatus
from .mime_types import get_mime_type

__all__ = [
    # Requests
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "parse_query",
    "get_value",

    # Responses
    "HTTPResponse",
    "ResponseContext",
    "error_response",
    "not_found",
    "internal_error",
    "service_unavailable",

    # Routing
    "Route",
    "RouteTable",
    "Service",
    "FunctionService",
    "Dispatcher",

    "HTTPStatus",
    "get_mime_type",
]
