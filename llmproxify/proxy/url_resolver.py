from typing import Optional
from urllib.parse import quote, unquote, urljoin, urlsplit

from llmproxify.errors import UrlParseError

SUPPORTED_SCHEMES = ("http", "https")


def parse_base_url(base: str):
    """Split ``base`` and make sure it is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(base)
        # Accessing the port validates it (raises ValueError when out of range).
        parts.port
    except ValueError as e:
        raise UrlParseError(f"{e} ({base!r})") from e

    if not parts.scheme:
        raise UrlParseError(f"relative URL without a base ({base!r})")
    if parts.scheme not in SUPPORTED_SCHEMES:
        raise UrlParseError(f"unsupported scheme '{parts.scheme}' ({base!r})")
    if not parts.hostname:
        raise UrlParseError(f"empty host ({base!r})")
    return parts


def join_remainder(base: str, remainder: str) -> str:
    """
    Resolve ``remainder`` against ``base`` as a relative reference (RFC 3986).

    A base ending in "/" gets the remainder appended; otherwise the remainder
    replaces the last path segment. A base with an empty path is treated as "/".
    The result must stay on the base URL's scheme and authority.
    """
    base_parts = parse_base_url(base)
    try:
        joined = urljoin(base, remainder)
        joined_parts = urlsplit(joined)
    except ValueError as e:
        raise UrlParseError(f"{e} (remainder {remainder!r})") from e

    if (joined_parts.scheme, joined_parts.netloc) != (
        base_parts.scheme,
        base_parts.netloc,
    ):
        raise UrlParseError(
            f"remainder {remainder!r} leaves the provider host {base_parts.netloc}"
        )

    # urljoin keeps an empty path as-is; normalise to "/" like a parsed URL.
    if not joined_parts.path:
        joined = joined_parts._replace(path="/").geturl()
    return joined


def build_upstream_url(base: str, remainder: str, query: Optional[str] = None) -> str:
    """Build the upstream URL; the query string is re-appended verbatim."""
    url = join_remainder(base, remainder)
    if query:
        return f"{url}?{query}"
    return url


# Sub-delimiters and ":@" are legal in a path segment and stay as they are.
REMAINDER_SAFE = "/:@!$&'()*+,;=~"


def raw_remainder(raw_path: Optional[bytes], provider: str, rest: str) -> str:
    """
    Recover the remainder path with its percent-encoding intact.

    Starlette hands the route the decoded path, where "%23", "%3F" and "%2F"
    have already become "#", "?" and "/". The remainder is taken from the raw
    request path instead; when that is unavailable or does not start with the
    provider segment, the decoded value is quoted again.
    """
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
        head, sep, tail = path.lstrip("/").partition("/")
        if sep and unquote(head) == provider:
            return tail
    return quote(rest, safe=REMAINDER_SAFE)
