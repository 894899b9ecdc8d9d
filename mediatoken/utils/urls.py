"""Resource name and access URL helpers."""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urlencode, urlsplit

from mediatoken.errors import InvalidResourceError

MAX_RESOURCE_LENGTH = 512
TOKEN_PARAM = "token"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def normalize_resource(name: str) -> str:
    """Return the signed identity of ``name``.

    Leading slashes are stripped so ``/a/b.jpg`` and ``a/b.jpg`` name the
    same resource. Names that could not be carried safely in an access URL
    raise :class:`InvalidResourceError`.
    """
    if not isinstance(name, str):
        raise InvalidResourceError("resource name must be a string")
    if len(name) > MAX_RESOURCE_LENGTH:
        raise InvalidResourceError(f"resource name longer than {MAX_RESOURCE_LENGTH} characters")
    normalized = name.lstrip("/")
    if not normalized:
        raise InvalidResourceError("resource name is empty")
    if _CONTROL_CHARS.search(normalized):
        raise InvalidResourceError("resource name contains control characters")
    if "://" in normalized:
        raise InvalidResourceError("resource name must not include a scheme or host")
    if "?" in normalized or "#" in normalized:
        raise InvalidResourceError("resource name must not include a query or fragment")
    if ".." in normalized.split("/"):
        raise InvalidResourceError("resource name contains a '..' segment")
    return normalized


def resource_from_url(url: str | None) -> str | None:
    """Extract the resource name from a media URL or path.

    Scheme, host, query string (including any stale token) and leading
    slashes are dropped. Returns ``None`` when nothing is left.
    """
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        path = urlsplit(url).path
    else:
        path = url.split("#", 1)[0].split("?", 1)[0]
    name = unquote(path).lstrip("/")
    return name or None


def build_access_url(base_url: str, resource: str, token: str) -> str:
    name = normalize_resource(resource)
    query = urlencode({TOKEN_PARAM: token})
    return f"{base_url.rstrip('/')}/{quote(name, safe='/')}?{query}"
