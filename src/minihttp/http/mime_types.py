"""
=============================================================================
CONTENT-TYPE INFERENCE
=============================================================================

Maps a static file's extension to the Content-Type header it is served
with.

The table covers what a typical web root holds
(pages, stylesheets, scripts, images) and nothing else:

    ┌────────────────┬──────────────────────────────┐
    │  Extension     │  Content-Type                │
    ├────────────────┼──────────────────────────────┤
    │  .html         │  text/html                   │
    │  .css          │  text/css                    │
    │  .js           │  text/javascript             │
    │  .png          │  image/png                   │
    │  .jpg / .jpeg  │  image/jpg                   │
    │  (anything)    │  application/octet-stream    │
    └────────────────┴──────────────────────────────┘

Note ``image/jpg`` rather than the IANA ``image/jpeg``: clients of the
existing deployments match on that exact string.

Dynamic routes never go through this table. Their responses are framed
with DEFAULT_SERVICE_TYPE unless the handler picks something else.

=============================================================================
"""

from pathlib import Path
from typing import Optional, Union


MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".png": "image/png",
    ".jpg": "image/jpg",
    ".jpeg": "image/jpg",
}

# Unknown extension: "some bytes, don't guess"
DEFAULT_MIME_TYPE = "application/octet-stream"

# Registered handlers are application endpoints, not file payloads
DEFAULT_SERVICE_TYPE = "application/json"


def get_mime_type(path: Union[str, Path], default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    The lookup is case-insensitive (``LOGO.PNG`` is ``image/png``).

    Args:
        path: File path or name with extension
        default: Returned for unmapped extensions instead of
                 application/octet-stream

    Examples:
        >>> get_mime_type("styles/style.css")
        'text/css'

        >>> get_mime_type("photo.JPEG")
        'image/jpg'

        >>> get_mime_type("archive.tar.xz")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)
