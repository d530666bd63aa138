import logging
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional, Union

import httpx
from fastapi import Request

from llmproxify.errors import (
    MethodNotAllowedError,
    UpstreamRequestError,
    UpstreamTimeoutError,
)
from llmproxify.utils import describe_headers, redact_url

logger = logging.getLogger("uvicorn.error")

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")

RequestBody = Union[bytes, AsyncIterator[bytes]]


def outbound_method(method: str) -> str:
    """Map the inbound method to the upstream one; anything unsupported is rejected."""
    method = method.upper()
    if method not in SUPPORTED_METHODS:
        raise MethodNotAllowedError(method, SUPPORTED_METHODS)
    return method


@dataclass
class UpstreamExchange:
    """An upstream response whose body has not been read yet, plus its client."""

    client: httpx.AsyncClient
    response: httpx.Response

    async def aclose(self) -> None:
        try:
            await self.response.aclose()
        finally:
            await self.client.aclose()


class UpstreamForwarder:
    """
    Sends proxied requests to the upstream provider.

    Each exchange gets its own client, closed together with the response once
    the relay is done with the body. When ``egress_proxy`` is set every request
    is routed through it, otherwise egress is direct (proxy environment
    variables are not consulted).
    """

    def __init__(
        self,
        egress_proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        stream_request_body: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.egress_proxy = egress_proxy
        self.timeout = timeout
        self.stream_request_body = stream_request_body
        self.transport = transport

    def _timeout(self) -> httpx.Timeout:
        if self.timeout is None or self.timeout <= 0:
            return httpx.Timeout(None)
        return httpx.Timeout(self.timeout)

    def build_client(self) -> httpx.AsyncClient:
        try:
            return httpx.AsyncClient(
                proxy=self.egress_proxy,
                timeout=self._timeout(),
                follow_redirects=False,
                trust_env=False,
                transport=self.transport,
            )
        except (ValueError, ImportError, httpx.InvalidURL) as e:
            raise UpstreamRequestError(
                f"could not configure egress proxy {self.egress_proxy!r}: {e}", e
            ) from e

    async def request_body(self, request: Request) -> RequestBody:
        if self.stream_request_body:
            return request.stream()
        return await request.body()

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: RequestBody = b"",
    ) -> UpstreamExchange:
        client = self.build_client()
        safe_url = redact_url(url)
        try:
            request = client.build_request(method, url, headers=headers, content=body)
            logger.debug(
                f"[Forwarder] {method} {safe_url} headers={describe_headers(headers)}"
                + (f" via {self.egress_proxy}" if self.egress_proxy else "")
            )
            response = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            await client.aclose()
            raise UpstreamTimeoutError(f"timed out calling {safe_url}: {e}", e) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            await client.aclose()
            raise UpstreamRequestError(f"{str(e) or type(e).__name__} ({safe_url})", e) from e
        except BaseException:
            await client.aclose()
            raise

        logger.debug(f"[Forwarder] {method} {safe_url} -> {response.status_code}")
        return UpstreamExchange(client=client, response=response)
