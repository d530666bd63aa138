import logging
from typing import AsyncIterator

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from llmproxify.proxy.forwarder import UpstreamExchange
from llmproxify.utils import redact_url

logger = logging.getLogger("uvicorn.error")


async def stream_upstream(exchange: UpstreamExchange) -> AsyncIterator[bytes]:
    """
    Yield the upstream body exactly as received.

    ``aiter_raw`` skips content decoding, so the bytes match whatever
    content-encoding and content-length the upstream announced. The next chunk
    is only read after the server has taken the previous one.
    """
    relayed = 0
    try:
        async for chunk in exchange.response.aiter_raw():
            relayed += len(chunk)
            yield chunk
    except httpx.HTTPError as e:
        logger.error(
            f"[Relay] Upstream body failed after {relayed} bytes "
            f"({redact_url(str(exchange.response.request.url))}): {e}",
            exc_info=True,
        )
        raise
    finally:
        await exchange.aclose()
        logger.debug(f"[Relay] Relayed {relayed} bytes")


def relay_response(exchange: UpstreamExchange) -> StreamingResponse:
    """Copy status and every upstream header, and stream the body to the client."""
    upstream = exchange.response
    response = StreamingResponse(
        stream_upstream(exchange),
        status_code=upstream.status_code,
        # Also runs when the client disconnects before the body is consumed.
        background=BackgroundTask(exchange.aclose),
    )
    response.raw_headers = [
        (name.lower(), value) for name, value in upstream.headers.raw
    ]
    return response
