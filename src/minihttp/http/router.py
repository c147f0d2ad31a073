"""
=============================================================================
ROUTE TABLE
=============================================================================

Maps exact request paths to services.

    ┌──────────────┬─────────────────────────────────────────┐
    │  Path        │  Service                                │
    ├──────────────┼─────────────────────────────────────────┤
    │  /hello      │  FunctionService(hello)                 │
    │  /pi         │  FunctionService(<lambda>)              │
    │  /hellopost  │  FunctionService(hellopost)             │
    └──────────────┴─────────────────────────────────────────┘

There is no pattern syntax: "/users/:id" is a literal path like any
other. Lookups compare the request path character for character.

=============================================================================
ONE KEY SPACE FOR ALL VERBS
=============================================================================

The table is keyed by path only. The verb given at registration is
recorded on the Route, but lookups ignore it:

    services.register("/item", read_item, method="GET")
    services.register("/item", save_item, method="POST")   # replaces read_item

    GET  /item   →  save_item
    POST /item   →  save_item

Dispatch never looks at the request method.

=============================================================================
THREAD SAFETY
=============================================================================

Workers read the table while host code may still be registering. Every
operation takes the table lock, so a lookup sees either the old entry or
the new one, never a half-written one.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable
import logging
import threading

from .request import HTTPRequest
from .response import ResponseContext


logger = logging.getLogger(__name__)


@runtime_checkable
class Service(Protocol):
    """
    Anything with a ``handle(request, response)`` method returning the body.

    Example:
        class Greeter:
            def handle(self, request, response):
                return "hello " + request.get_value("name")
    """

    def handle(self, request: HTTPRequest, response: ResponseContext) -> Union[str, bytes]:
        ...


class FunctionService:
    """Adapts a plain ``func(request, response) -> str`` to the Service protocol."""

    def __init__(self, func: Callable[[HTTPRequest, ResponseContext], Any]):
        self.func = func

    def handle(self, request: HTTPRequest, response: ResponseContext) -> Any:
        return self.func(request, response)

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", repr(self.func))
        return f"FunctionService({name})"


ServiceLike = Union[Service, Callable[[HTTPRequest, ResponseContext], Any]]


def as_service(handler: ServiceLike) -> Service:
    """
    Normalize a handler into a Service.

    Raises:
        TypeError: If handler has no ``handle`` method and is not callable.
    """
    if isinstance(handler, Service):
        return handler
    if callable(handler):
        return FunctionService(handler)
    raise TypeError(
        f"Handler must be callable or define handle(request, response), "
        f"got {type(handler).__name__}"
    )


@dataclass(frozen=True)
class Route:
    """
    A registered entry.

    ``method`` is the verb of the latest registration for this path. It is
    kept for logging and introspection; dispatch does not look at it.
    """

    path: str
    method: str
    service: Service


class RouteTable:
    """
    Lock-guarded path → Route registry.

    Example:
        services = RouteTable()
        services.register("/pi", lambda req, resp: str(math.pi))

        services.lookup("/pi")       # Route(path="/pi", method="GET", ...)
        services.lookup("/tau")      # None
        len(services)                # 1
    """

    def __init__(self):
        self._routes: Dict[str, Route] = {}
        self._lock = threading.Lock()

    def register(self, path: str, handler: ServiceLike, method: str = "GET") -> Route:
        """
        Insert or replace the route for ``path``.

        Args:
            path: Exact request path, e.g. "/hello"
            handler: Service or callable(request, response)
            method: Verb recorded on the route

        Returns:
            The stored Route.
        """
        route = Route(path=path, method=method.upper(), service=as_service(handler))

        with self._lock:
            previous = self._routes.get(path)
            self._routes[path] = route

        if previous is not None:
            logger.debug(
                f"Route {path} replaced ({previous.method} → {route.method})"
            )
        else:
            logger.debug(f"Route registered: {route.method} {path}")

        return route

    def lookup(self, path: str) -> Optional[Route]:
        with self._lock:
            return self._routes.get(path)

    def clear(self) -> None:
        """Remove every route."""
        with self._lock:
            self._routes.clear()

    def paths(self) -> List[str]:
        """Registered paths, in registration order."""
        with self._lock:
            return list(self._routes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._routes)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._routes

    def __repr__(self) -> str:
        return f"RouteTable({self.paths()!r})"
