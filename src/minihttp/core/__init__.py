"""
=============================================================================
NETWORKING CORE
=============================================================================

The transport half of the server. Nothing in here knows about HTTP
beyond "a request header block ends with a blank line".

    ┌───────────────────┐   accept()   ┌──────────────┐   submit()   ┌────────────┐
    │  SocketServer     │─────────────►│  Connection  │─────────────►│ ThreadPool │
    │  (listen, loop)   │              │  (one socket)│              │ (workers)  │
    └───────────────────┘              └──────────────┘              └────────────┘

    SocketServer     binds, listens, accepts; never blocks on a client
    Connection       reads the header block, sends one response, closes
    ThreadPool       bounded queue + worker threads; full queue → 503

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
