"""
=============================================================================
BUILT-IN HANDLERS
=============================================================================

Request handling that ships with the server itself, as opposed to the
services registered by host code.

    StaticResolver   Serves files below the configured web root when no
                     registered route matches.

    from minihttp.handlers import StaticResolver

    resolver = StaticResolver("/webroot")
    resolver.resolve("/index.html")

=============================================================================
"""

from .static import StaticFile, StaticResolver, normalize_root

__all__ = [
    "StaticFile",
    "StaticResolver",
    "normalize_root",
]
