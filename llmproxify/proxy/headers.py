from typing import Dict, Iterable, Mapping, Optional, Tuple

from llmproxify.vars import EXTRA_FORWARD_HEADERS

# Outbound credentials always travel under the lower-case header name.
AUTHORIZATION_HEADER = "authorization"

# Request headers passed upstream besides the credential. Everything else
# (Host, hop-by-hop, client network and custom headers) is dropped.
FORWARDED_HEADERS: Tuple[str, ...] = tuple(
    dict.fromkeys(
        ["x-api-key", "anthropic-version", "content-type", *EXTRA_FORWARD_HEADERS]
    )
)


def _lookup(headers: Mapping[str, str], name: str) -> Optional[str]:
    # Starlette headers are case-insensitive already; plain dicts are not.
    value = headers.get(name)
    if value is not None:
        return value
    for key, val in headers.items():
        if key.lower() == name:
            return val
    return None


def get_token(headers: Mapping[str, str]) -> Optional[str]:
    """Return the inbound Authorization value, forwarded verbatim."""
    return _lookup(headers, AUTHORIZATION_HEADER)


def select_headers(
    headers: Mapping[str, str],
    allowed: Iterable[str] = FORWARDED_HEADERS,
) -> Dict[str, str]:
    """
    Build the outbound header set from the inbound request headers.

    Only the credential and the allow-listed names survive; names are matched
    case-insensitively and emitted in lower case.
    """
    outbound: Dict[str, str] = {}

    token = get_token(headers)
    if token is not None:
        outbound[AUTHORIZATION_HEADER] = token

    for name in allowed:
        name = name.lower()
        value = _lookup(headers, name)
        if value is not None:
            outbound[name] = value
    return outbound
