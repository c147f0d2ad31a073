"""
=============================================================================
DISPATCHER
=============================================================================

Decides what answers a parsed request.

    HTTPRequest
        │
        ▼
    ┌─────────────────────────────┐   found
    │ 1. route table, exact path  │──────────► service(request, context)
    └─────────────────────────────┘                 │
        │ not found                                 ▼
        ▼                                     body framed with context
    ┌─────────────────────────────┐   found   (200 application/json
    │ 2. route table, path with   │─────────►  unless changed)
    │    "/app" prefix removed    │
    └─────────────────────────────┘
        │ not found
        ▼
    ┌─────────────────────────────┐   found
    │ 3. static resolver          │──────────► 200 + file bytes + MIME type
    └─────────────────────────────┘
        │ not found
        ▼
      404 {"error": "404 Not Found: <path>"}

A registered route always wins over a file of the same name.

Failures stay inside the request that caused them:

    service raises       →  500, traceback logged
    file unreadable      →  500, error logged

=============================================================================
"""

from typing import Any, Optional
import logging

from .request import HTTPRequest
from .response import (
    HTTPResponse,
    ResponseContext,
    file_response,
    internal_error,
    not_found,
)
from .router import Route, RouteTable
from .mime_types import DEFAULT_SERVICE_TYPE
from ..handlers.static import StaticResolver


logger = logging.getLogger(__name__)


def to_body(result: Any) -> bytes:
    """Coerce a service's return value into body bytes."""
    if result is None:
        return b""
    if isinstance(result, bytes):
        return result
    return str(result).encode("utf-8")


class Dispatcher:
    """
    Routes requests to services, static files, or a 404.

    Example:
        routes = RouteTable()
        routes.register("/hello", lambda req, resp: "hello " + req.get_value("name"))

        dispatcher = Dispatcher(routes, StaticResolver("/webroot"))
        dispatcher.dispatch(request)      # HTTPResponse
    """

    def __init__(
        self,
        routes: RouteTable,
        static: Optional[StaticResolver] = None,
        service_prefix: str = "/app",
        default_content_type: str = DEFAULT_SERVICE_TYPE,
    ):
        """
        Args:
            routes: Table consulted first, by exact path
            static: Resolver tried when no route matches; None disables files
            service_prefix: "/app/x" falls back to route "/x"; "" disables
            default_content_type: Content type services start with
        """
        self.routes = routes
        self.static = static
        self.service_prefix = service_prefix.rstrip("/")
        self.default_content_type = default_content_type

    def find_route(self, path: str) -> Optional[Route]:
        """Exact match first, then the path with the service prefix removed."""
        route = self.routes.lookup(path)
        if route is not None:
            return route

        prefix = self.service_prefix
        if prefix and path.startswith(prefix + "/"):
            return self.routes.lookup(path[len(prefix):])

        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Produce exactly one response for the request."""
        route = self.find_route(request.path)
        if route is not None:
            return self._call_service(route, request)

        if self.static is not None:
            return self._serve_static(request)

        return not_found(request.path)

    def _call_service(self, route: Route, request: HTTPRequest) -> HTTPResponse:
        context = ResponseContext(content_type=self.default_content_type)

        try:
            result = route.service.handle(request, context)
        except Exception:
            logger.exception(
                f"Service for {route.path} failed on {request.method} {request.target}"
            )
            return internal_error()

        return HTTPResponse.from_context(context, to_body(result))

    def _serve_static(self, request: HTTPRequest) -> HTTPResponse:
        try:
            found = self.static.resolve(request.path)
        except OSError as e:
            logger.error(f"Error reading static file for {request.path}: {e}")
            return internal_error("Failed to read file")

        if found is None:
            return not_found(request.path)

        return file_response(found.content, found.content_type)

