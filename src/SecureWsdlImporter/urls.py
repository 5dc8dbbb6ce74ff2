"""URL resolution for schema locations."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

__all__ = ["resolve_url"]


def resolve_url(base_url: str, location: str) -> str:
    """Resolve ``location`` against ``base_url``.

    Absolute locations are returned as-is; relative ones are resolved against
    the directory of ``base_url`` following RFC 3986. If either value cannot be
    parsed, or the base is not itself absolute, ``location`` is returned
    unchanged and the subsequent download reports the problem.

    Examples:
        >>> resolve_url("https://host/dir/service.wsdl", "schemas/a.xsd")
        'https://host/dir/schemas/a.xsd'
        >>> resolve_url("https://host/dir/service.wsdl", "https://other/b.xsd")
        'https://other/b.xsd'
    """
    location = location.strip()
    try:
        base = urlsplit(base_url)
        urlsplit(location)
        if not base.scheme or not base.netloc:
            return location
        return urljoin(base_url, location)
    except ValueError:
        return location
