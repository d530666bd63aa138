"""
Error types raised by the proxy pipeline.

Every error carries the HTTP status the routes answer with, so the request
handler can translate any of them into a single ``HTTPException``.
"""

from typing import Optional


class ProxyError(Exception):
    """Base class for failures while proxying a request."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProviderNotFoundError(ProxyError):
    status_code = 400

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Provider not found: {provider}")


class UrlParseError(ProxyError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(f"URL parse error: {message}")


class MethodNotAllowedError(ProxyError):
    status_code = 405

    def __init__(self, method: str, allowed: tuple[str, ...]):
        self.method = method
        self.allowed = allowed
        super().__init__(
            f"Method not allowed: {method} (supported: {', '.join(allowed)})"
        )


class UpstreamRequestError(ProxyError):
    """The outbound client could not be built or the exchange failed."""

    status_code = 502

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(f"Request error: {message}")


class UpstreamTimeoutError(UpstreamRequestError):
    status_code = 504


class SerializationError(ProxyError):
    """Malformed provider override configuration. Recovered at startup."""

    def __init__(self, message: str):
        super().__init__(f"JSON serialization/deserialization error: {message}")


class OtherProxyError(ProxyError):
    def __init__(self, message: str):
        super().__init__(f"Other error: {message}")
