"""
=============================================================================
ACCESS LOG
=============================================================================

One line per answered connection on the "minihttp.access" logger.

    text:  127.0.0.1 - - [19/Oct/2026:12:00:00 +0000] "GET /hello?name=Ada" 200 9 0.41ms
    json:  {"request_id": "3f2a9c1e", "method": "GET", "path": "/hello", ...}

The logger is separate from the server's own loggers so it can be routed
or silenced on its own:

    logging.getLogger("minihttp.access").setLevel(logging.WARNING)

Requests that never parsed (400/413) are still logged, with "-" for the
method and path.

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass
from typing import Optional, Tuple

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """A single access log entry."""

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache-style line."""
        target = self.path if not self.query else f"{self.path}?{self.query}"
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Formats and emits RequestLog entries.

    5xx responses are logged at WARNING, everything else at INFO.
    """

    def __init__(self, log_format: str = "text"):
        self.log_format = log_format

    def build_entry(
        self,
        request_id: str,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        client_address: Tuple[str, int],
        duration_ms: float,
    ) -> RequestLog:
        return RequestLog(
            request_id=request_id,
            method=request.method if request else "-",
            path=request.path if request else "-",
            query=(request.query or "") if request else "",
            client_ip=client_address[0],
            user_agent=(request.get_header("user-agent") if request else "") or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def log(
        self,
        request_id: str,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        client_address: Tuple[str, int],
        duration_ms: float,
    ) -> RequestLog:
        entry = self.build_entry(request_id, request, response, client_address, duration_ms)
        level = logging.WARNING if entry.status_code >= 500 else logging.INFO

        if self.log_format == "json":
            logger.log(level, json.dumps(entry.to_dict()))
        else:
            logger.log(level, entry.to_text())

        return entry
