"""
Conversion between filesystem paths and file:// URIs.

The editor records a file's identity either as a ``file://`` URI or as a
bare path, so lookups normalize both sides through these helpers before
comparing.
"""

import os
from urllib.parse import quote, unquote

FILE_URI_PREFIX = "file://"

# Characters left unescaped when building a URI: path separators plus the
# reserved and mark characters of RFC 3986 §2.2/§2.3.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


def uri_to_path(value: str) -> str:
    """Return the filesystem path for a ``file://`` URI.

    Anything without the ``file://`` prefix is returned unchanged.
    Percent-escapes are decoded as UTF-8, so multi-byte sequences
    (``%C3%A9``) come back as single characters.
    """
    if value.startswith(FILE_URI_PREFIX):
        return unquote(value[len(FILE_URI_PREFIX):])
    return value


def path_to_uri(value: str) -> str:
    """Return a ``file://`` URI for a filesystem path.

    Values that are already URIs are returned unchanged.
    """
    if value.startswith(FILE_URI_PREFIX):
        return value
    return FILE_URI_PREFIX + quote(value, safe=_URI_SAFE)


def normalize_path(value: str) -> str:
    """Absolute, clean filesystem form of a path or file URI.

    Collapses ``.`` and ``..`` segments and redundant separators.
    Symlinks are not resolved: the path may name a file that no longer exists.
    """
    return os.path.abspath(uri_to_path(value))


def is_absolute(value: str) -> bool:
    """True if the path (or file URI) names an absolute location."""
    return os.path.isabs(uri_to_path(value))
