"""
=============================================================================
CONNECTION WRAPPER
=============================================================================

Wraps one accepted client socket for the single request/response exchange
it carries.

    ┌──────────┐  read    ┌─────────┐  parsed  ┌─────────────┐
    │ ACCEPTED │────────►│ PARSING │────────►│ DISPATCHING │
    └──────────┘          └─────────┘          └─────────────┘
                               │ bad request         │ response ready
                               │                     ▼
                               │              ┌────────────┐
                               └────────────►│ RESPONDING │
                                              └────────────┘
                                                     │ sent (or send failed)
                                                     ▼
                                              ┌────────────┐
                                              │   CLOSED   │
                                              └────────────┘

CLOSED is reached on every path, including client hang-ups and server
errors: the connection is a context manager and __exit__ always closes.

There is no keep-alive. After one response the socket is shut down and
released.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..http.request import HTTPParseError


logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\r\n\r\n"

# Bounds on reading leftover client bytes before close()
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Where a connection is in its single exchange."""

    ACCEPTED = "accepted"
    PARSING = "parsing"
    DISPATCHING = "dispatching"
    RESPONDING = "responding"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port).
        id: Short identifier used in log lines.
        state: Current ConnectionState.
        created_at: When the connection was accepted.
        buffer_size: Bytes requested per recv() call.
        timeout: Socket read/write timeout in seconds; None blocks.
        max_request_size: Largest header block accepted.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = None
    max_request_size: int = 64 * 1024

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    def read_request(self) -> Optional[bytes]:
        """
        Read the request header block.

        Reads until the blank line that ends the headers. A client that
        hangs up early gets whatever it managed to send (the parser then
        decides whether that is a request).

        Returns:
            The bytes read, or None if the client sent nothing at all.

        Raises:
            HTTPParseError: (413) If the headers exceed max_request_size.
        """
        self.state = ConnectionState.PARSING
        buffer = b""

        try:
            while HEADER_TERMINATOR not in buffer:
                chunk = self._recv()
                if not chunk:
                    break

                buffer += chunk

                if len(buffer) > self.max_request_size:
                    raise HTTPParseError(
                        f"Request header block too large: {len(buffer)} bytes",
                        status_code=413,
                    )
        except socket.timeout:
            logger.debug(f"[{self.id}] Read timed out after {len(buffer)} bytes")
            return None

        return buffer or None

    def _recv(self) -> bytes:
        """socket.recv() that maps a client reset to end-of-stream."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response.

        Returns:
            True if everything was sent, False if the client went away.
        """
        self.state = ConnectionState.RESPONDING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send to {self.client_ip} failed: {e}")
            return False

    def close(self):
        """
        Shut down and release the socket.

        Sends FIN first, then drains unread client bytes before closing,
        at most DRAIN_LIMIT bytes and DRAIN_TIMEOUT seconds in total.
        Closing with unread data pending sends a reset.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass

        try:
            deadline = time.monotonic() + DRAIN_TIMEOUT
            drained = 0
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
