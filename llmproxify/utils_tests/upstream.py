from typing import Iterable, Optional, Tuple, Union

import httpx

HeaderList = Union[dict, Iterable[Tuple[str, str]]]


def upstream_response(
    status_code: int = 200,
    content: bytes = b"",
    headers: Optional[HeaderList] = None,
) -> httpx.Response:
    """
    Build a fake upstream response with an unread body.

    ``httpx.Response(content=...)`` reads the body on construction, which a
    real transport never does, so the bytes are wrapped in a stream instead.
    """
    header_list = list(headers.items() if isinstance(headers, dict) else headers or [])
    if not any(name.lower() == "content-length" for name, _ in header_list):
        header_list.append(("content-length", str(len(content))))
    return httpx.Response(
        status_code, headers=header_list, stream=httpx.ByteStream(content)
    )


class FakeUpstream:
    """Records the requests it receives and answers with ``handler``."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler = lambda request: upstream_response(
            200, b'{"ok": true}', {"content-type": "application/json"}
        )

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "upstream was never called"
        return self.requests[-1]
