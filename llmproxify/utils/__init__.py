import hashlib
from typing import Mapping, Optional
from urllib.parse import unquote_plus

# Header values that must never reach the logs in clear text.
SENSITIVE_HEADERS = {"authorization", "x-api-key", "proxy-authorization"}


def mask_credential(value: Optional[str], keep: int = 4) -> str:
    """Mask a credential, keeping the auth scheme and the first characters."""
    if not value:
        return "<empty>"
    scheme, _, secret = value.partition(" ")
    if not secret:
        scheme, secret = "", value
    masked = f"{secret[:keep]}****"
    return f"{scheme} {masked}" if scheme else masked


def credential_fingerprint(value: Optional[str]) -> str:
    """Provide a stable, low-leak credential identifier for logs."""
    if not value:
        return "<empty>"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"len={len(value)} sha256={digest}"


def describe_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        name: mask_credential(value) if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


# Query parameters some providers use to carry the API key (Gemini uses "key").
SENSITIVE_QUERY_PARAMS = {"key", "api_key", "api-key", "apikey", "access_token", "token"}


def redact_url(url: str) -> str:
    """Mask credential-bearing query parameters; everything else is kept verbatim."""
    base, sep, query = url.partition("?")
    if not sep:
        return url
    pairs = []
    for pair in query.split("&"):
        name, eq, value = pair.partition("=")
        if eq and unquote_plus(name).lower() in SENSITIVE_QUERY_PARAMS:
            pair = f"{name}={mask_credential(unquote_plus(value))}"
        pairs.append(pair)
    return f"{base}?{'&'.join(pairs)}"
