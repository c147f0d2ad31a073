"""
=============================================================================
QUERY STRING PARSER
=============================================================================

Extracts named parameters from the raw query string of a request target.

    GET /hello?name=Ada&age=36 HTTP/1.1
               ───────────────
                     │
               raw query string
                     │
          ┌──────────┴──────────┐
          ▼                     ▼
      name → "Ada"          age → "36"

=============================================================================
PARSING RULES
=============================================================================

    1. Split the query string on "&" into tokens
    2. Split each token on the FIRST "=" only
           "expr=a=b"  →  expr → "a=b"
    3. A token without "=" is a flag with an empty value
           "debug"     →  debug → ""
    4. Build the map left to right; a repeated name overwrites
           "tag=a&tag=b&tag=c"  →  tag → "c"
    5. No percent-decoding happens here
           "q=hello%20world"    →  q → "hello%20world"

A missing query string (``None``) and an empty one behave the same: every
lookup returns ``""``, never raises.

=============================================================================
WHY NOT urllib.parse.parse_qs?
=============================================================================

parse_qs decodes values, drops blank values unless asked, and collects
repeats into lists. Handlers here receive exactly what the client sent,
with last-wins semantics, so the splitting is done by hand.

=============================================================================
"""

from typing import Dict, Optional


def parse_query(query: Optional[str]) -> Dict[str, str]:
    """
    Parse a raw query string into an ordered name → value mapping.

    The result is rebuilt on every call; nothing is cached.

    Args:
        query: Raw query string without the leading "?", or None.

    Returns:
        Insertion-ordered dict; later duplicates replace earlier values.

    Examples:
        >>> parse_query("name=Ada&flag")
        {'name': 'Ada', 'flag': ''}

        >>> parse_query(None)
        {}
    """
    params: Dict[str, str] = {}
    if not query:
        return params

    for token in query.split("&"):
        name, _, value = token.partition("=")
        params[name] = value

    return params


def get_value(query: Optional[str], name: str) -> str:
    """
    Get one parameter's value, or "" if it is absent.

    Examples:
        >>> get_value("tag=a&tag=b&tag=c", "tag")
        'c'

        >>> get_value("name=Ada", "missing")
        ''
    """
    return parse_query(query).get(name, "")
