"""
=============================================================================
STATIC FILE RESOLVER
=============================================================================

Maps request paths onto files below one configured web root.

    Configured root:  "/webroot"      (same as "webroot")
    Base directory:   /srv/site       (process cwd unless configured)
    Effective root:   /srv/site/webroot

    GET /styles/style.css   →  /srv/site/webroot/styles/style.css   text/css
    GET /                   →  /srv/site/webroot/index.html          text/html
    GET /docs/              →  /srv/site/webroot/docs/index.html     text/html
    GET /missing.png        →  None                                   (404)
    GET /../secret.txt      →  None, warning logged                   (404)

=============================================================================
ROOT NORMALIZATION
=============================================================================

Web roots are written as "/webroot" by habit even when they are meant to
be relative to where the server runs. Leading separators are stripped and
the remainder is resolved under the base directory, so "/webroot",
"webroot" and "//webroot" all name the same directory.

=============================================================================
SECURITY
=============================================================================

Candidates are resolved (following ".." and symlinks) and must still sit
below the effective root. Anything else is reported as not found, never
as 403, so probing reveals nothing about the filesystem.

=============================================================================
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote
import logging
import os

from ..http.mime_types import get_mime_type


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaticFile:
    """A resolved file: where it was found, its bytes and its Content-Type."""

    path: Path
    content: bytes
    content_type: str


def normalize_root(root: Union[str, Path], base_dir: Optional[Union[str, Path]] = None) -> Path:
    """
    Turn a configured web root into an absolute directory.

    Examples:
        >>> normalize_root("/webroot", "/srv") == normalize_root("webroot", "/srv")
        True
    """
    relative = str(root).lstrip("/\\")
    base = Path(base_dir) if base_dir is not None else Path(os.getcwd())
    return (base / relative).resolve()


class StaticResolver:
    """
    Resolves request paths to files under a web root.

    Example:
        resolver = StaticResolver("/webroot")
        found = resolver.resolve("/styles/style.css")
        if found is not None:
            found.content_type   # "text/css"
    """

    def __init__(
        self,
        root: Union[str, Path],
        base_dir: Optional[Union[str, Path]] = None,
        index_file: str = "index.html",
    ):
        """
        Args:
            root: Configured web root ("/webroot", "webroot", ...)
            base_dir: Directory the root is relative to; cwd if None
            index_file: File served for directory requests
        """
        self.root = normalize_root(root, base_dir)
        self.index_file = index_file

        if not self.root.is_dir():
            logger.warning(f"Static root does not exist (yet): {self.root}")

    def resolve(self, request_path: str) -> Optional[StaticFile]:
        """
        Look up the file for a request path.

        Args:
            request_path: Path component of the request target, not decoded

        Returns:
            The file, or None when nothing servable exists there.

        Raises:
            OSError: If the file exists but cannot be read.
        """
        relative = unquote(request_path).lstrip("/")
        if "\x00" in relative:
            logger.warning(f"Null byte in static path: {request_path!r}")
            return None

        try:
            candidate = (self.root / relative).resolve()
        except (OSError, RuntimeError) as e:
            logger.debug(f"Cannot resolve {request_path!r}: {e}")
            return None

        try:
            candidate.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {request_path}")
            return None

        # Lookup failures (ENAMETOOLONG, ELOOP, ...) mean there is nothing to serve
        try:
            if candidate.is_dir():
                candidate = candidate / self.index_file

            if not candidate.is_file():
                return None
        except OSError as e:
            logger.debug(f"Cannot stat {request_path!r}: {e}")
            return None

        content = candidate.read_bytes()
        return StaticFile(
            path=candidate,
            content=content,
            content_type=get_mime_type(candidate),
        )

    def __repr__(self) -> str:
        return f"StaticResolver(root={str(self.root)!r})"
