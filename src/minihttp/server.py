"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: one accept loop, a worker pool, a parser, a
route table and a dispatcher.

    SocketServer.accept()
          │ Connection
          ▼
    _handle_connection ──► ThreadPool.submit()      (queue full → 503)
                                 │
                                 ▼
                        _process_connection        (worker thread)
                                 │
             ┌───────────────────┼─────────────────────────────┐
             ▼                   ▼                             ▼
       read header block    RequestParser.parse()      Dispatcher.dispatch()
                                 │ HTTPParseError → 400/413     │
                                 ▼                              ▼
                          send response, access log line, close

Each connection carries exactly one request and one response.

=============================================================================
USAGE
=============================================================================

    server = HTTPServer(ServerConfig(port=8080))

    @server.get("/hello")
    def hello(request, response):
        return "hello " + request.get_value("name")

    server.set_static_root("/webroot")
    server.run()        # blocks until SIGINT/SIGTERM or shutdown()

=============================================================================
"""

import logging
import time
import uuid
from typing import Callable, Optional, Tuple, Union

from .access_log import AccessLogger
from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer, ThreadPool
from .handlers.static import StaticResolver
from .http import (
    Dispatcher,
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    Route,
    RouteTable,
    error_response,
    service_unavailable,
)
from .http.router import ServiceLike


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Embeddable HTTP server.

    Every instance owns its own RouteTable; the module-level functions in
    ``minihttp.app`` drive one shared default instance.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        routes: Optional[RouteTable] = None,
    ):
        """
        Args:
            config: Server configuration; defaults to ServerConfig().
            routes: Route table to serve from; a new one if None.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
            overflow=self.config.overflow_workers,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._routes = routes if routes is not None else RouteTable()
        self._dispatcher = Dispatcher(
            self._routes,
            service_prefix=self.config.service_prefix,
            default_content_type=self.config.default_content_type,
        )
        self._access_log = AccessLogger(self.config.log_format)

        if self.config.static_dir is not None:
            self.set_static_root(self.config.static_dir)

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    @property
    def services(self) -> RouteTable:
        """The route table this server dispatches from."""
        return self._routes

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def route(
        self,
        path: str,
        handler: Optional[ServiceLike] = None,
        method: str = "GET",
    ) -> Union[Route, Callable[[ServiceLike], ServiceLike]]:
        """
        Register a service at an exact path.

        Used directly it returns the Route; without a handler it returns a
        decorator that registers the decorated function and hands it back
        unchanged.
        """
        if handler is not None:
            return self._routes.register(path, handler, method=method)

        def decorator(func: ServiceLike) -> ServiceLike:
            self._routes.register(path, func, method=method)
            return func

        return decorator

    def get(self, path: str, handler: Optional[ServiceLike] = None):
        """
        Register a service under GET.

        Example:
            server.get("/pi", lambda request, response: str(math.pi))

            @server.get("/world")
            def world(request, response):
                return "hello world!"
        """
        return self.route(path, handler, method="GET")

    def post(self, path: str, handler: Optional[ServiceLike] = None):
        """
        Register a service under POST.

        Paths are shared across verbs: this replaces any GET service
        already registered at ``path`` and answers GET requests too.
        """
        return self.route(path, handler, method="POST")

    def set_static_root(self, path: str) -> StaticResolver:
        """Serve files from ``path`` (relative to static_base_dir) when no route matches."""
        resolver = StaticResolver(
            path,
            base_dir=self.config.static_base_dir,
            index_file=self.config.index_file,
        )
        self.config.static_dir = path
        self._dispatcher.static = resolver
        logger.info(f"Serving static files from {resolver.root}")
        return resolver

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening with port 0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start serving. Blocks until shutdown.

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._thread_pool.start()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )
        for path in self._routes.paths():
            route = self._routes.lookup(path)
            if route is not None:
                logger.info(f"  {route.method:<6} {path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask a running server to stop; run() returns once it has."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True, timeout=5.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Queue a connection on the pool; answer 503 if the pool is saturated."""
        submitted = self._thread_pool.submit(
            self._process_connection,
            args=(conn,),
            block=False,
        )

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            with conn:
                self._send(conn, None, service_unavailable(), time.time())

    def _process_connection(self, conn: Connection):
        """
        Serve one request on a worker thread.

        Always leaves the connection CLOSED, whatever happens in between.
        """
        start_time = time.time()

        with conn:
            try:
                raw_request = conn.read_request()
                if raw_request is None:
                    logger.debug(f"[{conn.id}] Client sent nothing, closing")
                    return

                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.info(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                self._send(conn, None, error_response(e.status_code, str(e)), start_time)
                return

            conn.state = ConnectionState.DISPATCHING
            response = self._dispatcher.dispatch(request)
            self._send(conn, request, response, start_time)

    def _send(
        self,
        conn: Connection,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        start_time: float,
    ):
        conn.send_response(response.to_bytes(self.config.server_name))

        self._access_log.log(
            request_id=str(uuid.uuid4())[:8],
            request=request,
            response=response,
            client_address=conn.address,
            duration_ms=(time.time() - start_time) * 1000,
        )


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server instance.

    Example:
        app = create_app(ServerConfig(port=3000))
        app.get("/pi", lambda request, response: str(math.pi))
        app.run()
    """
    return HTTPServer(config)
