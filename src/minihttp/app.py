"""
=============================================================================
DEFAULT APPLICATION
=============================================================================

Module-level registration API for the common case of one server per
process:

    from minihttp import get, post, staticfiles, start

    staticfiles("/webroot")
    get("/pi", lambda request, response: str(math.pi))

    @post("/hellopost")
    def hellopost(request, response):
        return "hello " + request.get_value("name")

    start()         # blocks; reads HTTP_* env vars and sys.argv

Routes land in the process-wide ``services`` table. Registering after
start() is fine: the running server reads the same table.

=============================================================================
"""

import argparse
import logging
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .http.router import RouteTable, ServiceLike
from .server import HTTPServer


logger = logging.getLogger(__name__)

services = RouteTable()
"""Process-wide route table used by get(), post() and start()."""

_static_root: Optional[str] = None
_server: Optional[HTTPServer] = None


def _register(path: str, handler: Optional[ServiceLike], method: str):
    if handler is not None:
        return services.register(path, handler, method=method)

    def decorator(func: ServiceLike) -> ServiceLike:
        services.register(path, func, method=method)
        return func

    return decorator


def get(path: str, handler: Optional[ServiceLike] = None):
    """Register a GET service on the default application. Usable as a decorator."""
    return _register(path, handler, "GET")


def post(path: str, handler: Optional[ServiceLike] = None):
    """
    Register a POST service on the default application.

    Shares the path namespace with get(): the later registration wins for
    every verb.
    """
    return _register(path, handler, "POST")


def staticfiles(path: str) -> None:
    """Set the web root served when no service matches ("/webroot" == "webroot")."""
    global _static_root
    _static_root = path

    if _server is not None:
        _server.set_static_root(path)


def build_parser() -> argparse.ArgumentParser:
    """Command line options shared by ``python -m minihttp`` and start()."""
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal embeddable HTTP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                        # 127.0.0.1:35000
  python -m minihttp --port 8080            # Custom port
  python -m minihttp --host 0.0.0.0         # Listen on all interfaces
  python -m minihttp --static /public       # Serve ./public
  python -m minihttp -l DEBUG               # Verbose logging
        """
    )

    # Defaults stay None so HTTP_* environment variables still apply
    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, or HTTP_HOST)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 35000, or HTTP_PORT)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum worker threads (default: 16, or HTTP_WORKERS)"
    )

    parser.add_argument(
        "--static", "-s",
        default=None,
        help="Web root, resolved under the working directory (e.g. /webroot)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO, or HTTP_LOG_LEVEL)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then whatever was given on the command line."""
    overrides = {}

    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.workers is not None:
        overrides["max_workers"] = args.workers
        overrides["min_workers"] = min(ServerConfig.min_workers, args.workers)
    if args.static is not None:
        overrides["static_dir"] = args.static
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    return ServerConfig.from_env(**overrides)


def start(argv: Optional[List[str]] = None) -> None:
    """
    Serve the default application. Blocks until SIGINT/SIGTERM.

    Args:
        argv: Command line arguments; sys.argv[1:] when None.
    """
    global _server

    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    if config.static_dir is None and _static_root is not None:
        config.static_dir = _static_root

    _server = HTTPServer(config, routes=services)
    try:
        _server.run()
    finally:
        _server = None


def stop() -> None:
    """Stop a default application started from another thread."""
    if _server is not None:
        _server.shutdown()
