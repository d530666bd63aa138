import importlib

import pytest
from starlette.datastructures import Headers

from llmproxify.proxy.headers import (
    AUTHORIZATION_HEADER,
    FORWARDED_HEADERS,
    get_token,
    select_headers,
)


def _starlette_headers(pairs):
    return Headers(raw=[(k.lower().encode(), v.encode()) for k, v in pairs])


class TestGetToken:
    def test_token_present(self):
        headers = _starlette_headers([("Authorization", "Bearer sk-test")])

        assert get_token(headers) == "Bearer sk-test"

    def test_token_absent(self):
        assert get_token(_starlette_headers([("x-api-key", "abc")])) is None

    def test_plain_dict_lookup_is_case_insensitive(self):
        assert get_token({"AUTHORIZATION": "Bearer upper"}) == "Bearer upper"


class TestSelectHeaders:
    def test_default_allow_list(self):
        assert FORWARDED_HEADERS[:3] == ("x-api-key", "anthropic-version", "content-type")

    def test_only_allow_listed_headers_forwarded(self):
        headers = _starlette_headers(
            [("X-Custom", "foo"), ("x-api-key", "abc"), ("Host", "proxy.local")]
        )

        result = select_headers(headers)

        assert result == {"x-api-key": "abc"}

    def test_authorization_forwarded_lower_case(self):
        headers = _starlette_headers(
            [("Authorization", "Bearer sk-123"), ("X-Custom", "foo")]
        )

        result = select_headers(headers)

        assert result == {AUTHORIZATION_HEADER: "Bearer sk-123"}
        assert "Authorization" not in result

    def test_anthropic_headers(self):
        headers = _starlette_headers(
            [
                ("x-api-key", "sk-ant"),
                ("anthropic-version", "2023-06-01"),
                ("content-type", "application/json"),
                ("anthropic-beta", "tools-2024-04-04"),
            ]
        )

        result = select_headers(headers)

        assert result == {
            "x-api-key": "sk-ant",
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }

    def test_hop_by_hop_and_client_headers_dropped(self):
        headers = _starlette_headers(
            [
                ("connection", "keep-alive"),
                ("transfer-encoding", "chunked"),
                ("x-forwarded-for", "10.0.0.1"),
                ("cookie", "session=1"),
                ("content-length", "12"),
                ("user-agent", "curl/8"),
            ]
        )

        assert select_headers(headers) == {}

    def test_no_content_type_synthesised(self):
        headers = _starlette_headers([("Authorization", "Bearer t")])

        assert "content-type" not in select_headers(headers)

    def test_plain_dict_mixed_case(self):
        result = select_headers({"Content-Type": "text/plain", "X-API-KEY": "k"})

        assert result == {"content-type": "text/plain", "x-api-key": "k"}

    def test_custom_allow_list(self):
        headers = _starlette_headers([("openai-organization", "org-1"), ("x-api-key", "k")])

        result = select_headers(headers, allowed=["OpenAI-Organization"])

        assert result == {"openai-organization": "org-1"}


class TestExtraForwardHeaders:
    @pytest.mark.asyncio
    async def test_extra_header_reaches_upstream(self, monkeypatch, upstream, forwarder):
        import llmproxify.proxy.headers as headers_module
        import llmproxify.vars as vars_module

        monkeypatch.setenv("EXTRA_FORWARD_HEADERS", "OpenAI-Organization")
        try:
            importlib.reload(vars_module)
            importlib.reload(headers_module)

            assert "openai-organization" in headers_module.FORWARDED_HEADERS
            outbound = headers_module.select_headers(
                _starlette_headers(
                    [("OpenAI-Organization", "org-42"), ("X-Custom", "foo")]
                )
            )
            exchange = await forwarder.send("GET", "https://api.openai.com/v1/models", outbound)
            await exchange.aclose()
        finally:
            monkeypatch.undo()
            importlib.reload(vars_module)
            importlib.reload(headers_module)

        assert outbound == {"openai-organization": "org-42"}
        assert upstream.last_request.headers["openai-organization"] == "org-42"
        assert "x-custom" not in upstream.last_request.headers
        assert "openai-organization" not in headers_module.FORWARDED_HEADERS
