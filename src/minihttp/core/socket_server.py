"""
=============================================================================
TCP ACCEPTOR
=============================================================================

Owns the listening socket and the accept loop. Every accepted socket is
wrapped in a Connection and handed to a callback; the HTTP server's
callback queues it on the worker pool, so this loop never parses or
writes anything itself.

    start(handler)
        │
        ├──► socket() + SO_REUSEADDR + TCP_NODELAY
        ├──► bind((host, port))         port 0 → kernel picks one
        ├──► listen(backlog)
        ├──► SIGINT / SIGTERM → shutdown()     (main thread only)
        │
        └──► while running:
                 accept()               1s timeout, re-checks running
                 handler(Connection(...))

    shutdown()  flips running off; the loop notices within a second

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Listening socket plus accept loop.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set once listening, cleared again on shutdown
        self._ready = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        (host, port) actually bound.

        Before start() this is the configured address. With port 0 the real
        port is only known once listening.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting out TIME_WAIT on the old port
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't hold back the tail
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up every second to check _running
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """
        Turn SIGINT/SIGTERM into a graceful shutdown.

        Python only allows signal handlers on the main thread. When the
        server runs in a background thread (embedding, tests) the host
        keeps its own handlers and calls shutdown() itself.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept until shutdown() is called.

        Args:
            connection_handler: Called on the accept thread with each new
                                Connection. Must not block for long.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            )

            # One bad connection must not take the listener down with it
            try:
                connection_handler(conn)
            except Exception:
                logger.exception(f"[{conn.id}] Failed to hand off connection")
                conn.close()

    def shutdown(self):
        """Stop accepting. Idempotent, callable from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. True if it is."""
        return self._ready.wait(timeout)

