"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables in one dataclass, validated when the server is built.

    config = ServerConfig(port=0, static_dir="/webroot")   # in code
    config = ServerConfig.from_env()                       # from HTTP_* vars

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Any, Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK         host, port, backlog, buffer_size, timeout
    REQUESTS        max_request_size
    THREADING       min_workers, max_workers, queue_size, overflow_workers
    STATIC FILES    static_dir, static_base_dir, index_file
    SERVICES        service_prefix, default_content_type
    LOGGING         log_level, log_format
    IDENTITY        server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 35000
    """Port to listen on. 0 lets the OS pick a free one (tests)."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing."""

    buffer_size: int = 8192
    """Bytes per recv() call."""

    timeout: Optional[float] = None
    """
    Per-socket read/write timeout in seconds.
    None blocks indefinitely, matching the server's historic behavior.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUESTS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 64 * 1024
    """Largest request header block accepted; bigger ones get 413."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    queue_size: int = 100
    """Connections that may wait for a worker before new ones get 503."""

    overflow_workers: bool = True
    """
    Once max_workers are all busy, serve each further connection on a
    short-lived thread of its own instead of leaving it queued.
    """

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    static_dir: Optional[str] = None
    """
    Web root, e.g. "/webroot". Leading separators are ignored: the root is
    always resolved under static_base_dir. None serves no files.
    """

    static_base_dir: Optional[str] = None
    """Directory static_dir is relative to. None means the working directory."""

    index_file: str = "index.html"
    """Served for "/" and for any other directory request."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVICES
    # ─────────────────────────────────────────────────────────────────────

    service_prefix: str = "/app"
    """
    "/app/hello" reaches the service registered at "/hello" when
    "/app/hello" itself is not registered. Empty string disables it.
    """

    default_content_type: str = "application/json"
    """Content-Type of service responses unless the service changes it."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """Access log line format: "text" (Apache-like) or "json"."""

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "minihttp/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls, **overrides: Any) -> "ServerConfig":
        """
        Build a configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST        Bind address             (default: 127.0.0.1)
        HTTP_PORT        Port                     (default: 35000)
        HTTP_WORKERS     Max worker threads       (default: 16)
        HTTP_TIMEOUT     Socket timeout, seconds  (default: none)
        HTTP_STATIC_DIR  Web root                 (default: none)
        HTTP_LOG_LEVEL   Logging level            (default: INFO)

        Keyword arguments win over the environment:

            ServerConfig.from_env(port=0)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        max_workers = int(os.getenv("HTTP_WORKERS", "16"))

        values = dict(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "35000")),
            max_workers=max_workers,
            min_workers=min(cls.min_workers, max_workers),
            timeout=float(timeout) if timeout else None,
            static_dir=os.getenv("HTTP_STATIC_DIR"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
        )
        values.update(overrides)
        return cls(**values)

    def validate(self) -> None:
        """
        Check value ranges, failing fast at startup.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}"
            )
