import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response
from opentelemetry import trace

from llmproxify.errors import MethodNotAllowedError, OtherProxyError, ProxyError
from llmproxify.providers import ProviderRegistry, load_providers
from llmproxify.proxy import (
    UpstreamForwarder,
    build_upstream_url,
    outbound_method,
    raw_remainder,
    relay_response,
    select_headers,
)
from llmproxify.utils import credential_fingerprint, redact_url
from llmproxify.utils.traced_requests import traced_request
from llmproxify.vars import (
    ALL_PROXY,
    API_PROVIDERS,
    PROXY_TIMEOUT,
    STREAM_REQUEST_BODY,
)

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

GREETING = "Hello, llmproxify!"

# Unsupported methods are routed too so they get an explicit 405 from the
# forwarder instead of being proxied as something else.
ROUTED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

providers = load_providers(API_PROVIDERS)
forwarder = UpstreamForwarder(
    egress_proxy=ALL_PROXY,
    timeout=PROXY_TIMEOUT,
    stream_request_body=STREAM_REQUEST_BODY,
)

if ALL_PROXY:
    logger.info(f"Routing upstream traffic through {ALL_PROXY}")


def get_provider_registry() -> ProviderRegistry:
    return providers


def get_forwarder() -> UpstreamForwarder:
    return forwarder


def _to_http_exception(error: ProxyError) -> HTTPException:
    headers = None
    if isinstance(error, MethodNotAllowedError):
        headers = {"Allow": ", ".join(error.allowed)}
    return HTTPException(
        status_code=error.status_code, detail=error.message, headers=headers
    )


async def forward_request(
    request: Request,
    provider: str,
    rest: str,
    registry: ProviderRegistry,
    upstream: UpstreamForwarder,
) -> Response:
    """
    Proxy one request: resolve the provider, build the upstream URL, filter
    the headers, send the request and relay the streamed response.
    """
    with traced_request(
        tracer,
        operation="proxy_request",
        provider=provider,
        method=request.method,
        start_message=f"[Proxy] {request.method} {request.url.path}",
    ) as span:
        try:
            method = outbound_method(request.method)
            base_url = registry.resolve(provider)
            url = build_upstream_url(base_url, rest, request.url.query)
            safe_url = redact_url(url)
            span.set_attribute("proxy.target_url", safe_url)
            logger.info(f"Upstream URL: {safe_url}")

            headers = select_headers(request.headers)
            if "authorization" in headers:
                logger.debug(
                    f"[Proxy] Forwarding credential {credential_fingerprint(headers['authorization'])}"
                )

            body = await upstream.request_body(request)
            exchange = await upstream.send(method, url, headers, body)
        except ProxyError as e:
            span.set_attribute("proxy.error", type(e).__name__)
            if e.status_code >= 500:
                logger.error(f"[Proxy] {provider}/{rest}: {e}")
            else:
                logger.warning(f"[Proxy] {provider}/{rest}: {e}")
            raise _to_http_exception(e)
        except Exception as e:
            logger.error(f"[Proxy] Unexpected error for {provider}/{rest}: {e}", exc_info=True)
            span.set_attribute("proxy.error", str(e))
            raise _to_http_exception(OtherProxyError(str(e)))

        span.set_attribute("proxy.status_code", exchange.response.status_code)
        return relay_response(exchange)


@router.get("/", response_class=PlainTextResponse)
async def index():
    return GREETING


@router.api_route("/{provider}", methods=ROUTED_METHODS, include_in_schema=False)
async def proxy_provider_root(
    request: Request,
    provider: str,
    registry: ProviderRegistry = Depends(get_provider_registry),
    upstream: UpstreamForwarder = Depends(get_forwarder),
):
    return await forward_request(request, provider, "", registry, upstream)


@router.api_route("/{provider}/{rest:path}", methods=ROUTED_METHODS)
async def proxy(
    request: Request,
    provider: str,
    rest: str,
    registry: ProviderRegistry = Depends(get_provider_registry),
    upstream: UpstreamForwarder = Depends(get_forwarder),
):
    """Forward the request to the provider named by the first path segment."""
    rest = raw_remainder(request.scope.get("raw_path"), provider, rest)
    return await forward_request(request, provider, rest, registry, upstream)
