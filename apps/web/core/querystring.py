"""Query-string helpers for locations the app redirects to."""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def without_params(location: str, *names: str) -> str:
    """
    Return `location` with the named query parameters removed.

    Other parameters keep their order; the fragment is preserved.

        >>> without_params("/r/menu/checkout/?email=a%40b.c&x=1", "email")
        '/r/menu/checkout/?x=1'
    """
    parts = urlsplit(location)
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(key, value) for key, value in pairs if key not in names]
    return urlunsplit(parts._replace(query=urlencode(kept)))


def with_params(location: str, **params: str) -> str:
    """Return `location` with the given query parameters set."""
    parts = urlsplit(location)
    merged = dict(parse_qsl(parts.query, keep_blank_values=True))
    merged.update(params)
    return urlunsplit(parts._replace(query=urlencode(merged)))
