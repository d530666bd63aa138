from .forwarder import (
    SUPPORTED_METHODS,
    UpstreamExchange,
    UpstreamForwarder,
    outbound_method,
)
from .headers import FORWARDED_HEADERS, get_token, select_headers
from .relay import relay_response
from .url_resolver import build_upstream_url, raw_remainder

__all__ = [
    "SUPPORTED_METHODS",
    "UpstreamExchange",
    "UpstreamForwarder",
    "outbound_method",
    "FORWARDED_HEADERS",
    "get_token",
    "select_headers",
    "relay_response",
    "build_upstream_url",
    "raw_remainder",
]
