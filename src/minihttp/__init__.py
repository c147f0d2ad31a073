"""
=============================================================================
MINIHTTP - Minimal Embeddable HTTP Server
=============================================================================

Accepts TCP connections, parses the request line, and answers each request
from a registered service or a static web root. One request per
connection, then the connection is closed.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # Demo application (python -m minihttp)
    ├── app.py               # Module-level get/post/staticfiles/start
    ├── server.py            # HTTPServer: ties everything together
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # One line per request on minihttp.access
    ├── core/                # Transport
    │   ├── socket_server.py # Listening socket + accept loop
    │   ├── connection.py    # One client socket, one exchange
    │   └── thread_pool.py   # Bounded worker pool
    ├── http/                # Protocol
    │   ├── request.py       # Request line + header parsing
    │   ├── query.py         # Query string lookups
    │   ├── response.py      # ResponseContext + response framing
    │   ├── router.py        # RouteTable, Service protocol
    │   ├── dispatcher.py    # Route → static → 404
    │   ├── status_codes.py  # HTTPStatus enum
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        └── static.py        # Web root file resolution

=============================================================================
QUICK START
=============================================================================

    import math
    from minihttp import get, post, staticfiles, start

    staticfiles("/webroot")

    get("/pi", lambda request, response: str(math.pi))

    @get("/hello")
    def hello(request, response):
        return "hello " + request.get_value("name")

    start()

    # Or, with an explicit instance:

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=8080))
    server.get("/pi", lambda request, response: str(math.pi))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, create_app
from .http import HTTPRequest, ResponseContext, HTTPStatus, RouteTable, Service
from .app import get, post, staticfiles, start, stop, services

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "create_app",
    "HTTPRequest",
    "ResponseContext",
    "HTTPStatus",
    "RouteTable",
    "Service",
    "get",
    "post",
    "staticfiles",
    "start",
    "stop",
    "services",
    "__version__",
]
