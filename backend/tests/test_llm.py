"""
Unit tests for the LLM module.
Tests LLMResult, AnthropicProvider, format shaping, and the factory.
"""

import json
from types import SimpleNamespace

import httpx
import pytest

from chat_proxy.llm.anthropic_provider import AnthropicProvider, NO_CONTENT_PLACEHOLDER
from chat_proxy.llm.base import LLMResult, ResultKind
from chat_proxy.llm.factory import create_llm_provider
from chat_proxy.llm.formatting import enhance_message
from chat_proxy.models.chat import ResponseFormat
from chat_proxy.models.session import Message, MessageRole


def make_provider(handler, **kwargs):
    """AnthropicProvider whose HTTP client is served by handler."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AnthropicProvider(api_key="sk-ant-test", http_client=client, **kwargs)


def success_body(text="Hello from Claude"):
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-5-sonnet-20241022",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 12, "output_tokens": 5},
    }


class TestLLMResult:
    """Tests for the tagged result type."""

    def test_success(self):
        result = LLMResult.success("Hi", model="m", usage={"input_tokens": 1})
        assert result.ok
        assert result.kind is ResultKind.SUCCESS
        assert result.text_or_error() == "Hi"
        assert result.usage == {"input_tokens": 1}

    def test_upstream_error(self):
        result = LLMResult.upstream_error("overloaded", status_code=529)
        assert not result.ok
        assert result.status_code == 529
        assert result.text_or_error() == "Claude API Error: overloaded"

    def test_transport_error(self):
        result = LLMResult.transport_error("connection refused")
        assert not result.ok
        assert result.text_or_error() == "Error: connection refused"

    def test_timeout(self):
        result = LLMResult.timeout("timed out")
        assert result.kind is ResultKind.TIMEOUT
        assert not result.ok


class TestAnthropicProvider:
    """Tests for the Anthropic Messages API client."""

    def test_init_defaults(self):
        provider = AnthropicProvider(api_key="sk-ant-test")
        assert provider.model == "claude-3-5-sonnet-20241022"
        assert provider.api_url == "https://api.anthropic.com/v1/messages"
        assert provider.api_version == "2023-06-01"
        assert provider.timeout == 30.0

    def test_headers(self):
        provider = AnthropicProvider(api_key="sk-ant-123", api_version="2024-01-01")
        headers = provider._get_headers()
        assert headers["x-api-key"] == "sk-ant-123"
        assert headers["anthropic-version"] == "2024-01-01"
        assert headers["content-type"] == "application/json"

    def test_format_messages_appends_new_user_text(self):
        provider = AnthropicProvider(api_key="k")
        history = [
            Message(MessageRole.USER, "M1", 1),
            Message(MessageRole.ASSISTANT, "R1", 2),
        ]
        assert provider._format_messages(history, "M2") == [
            {"role": "user", "content": "M1"},
            {"role": "assistant", "content": "R1"},
            {"role": "user", "content": "M2"},
        ]

    @pytest.mark.asyncio
    async def test_send_success(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json=success_body())

        provider = make_provider(handler, default_max_tokens=256, default_temperature=0.5)
        history = [Message(MessageRole.USER, "hi", 1), Message(MessageRole.ASSISTANT, "hello", 1)]

        result = await provider.send(history, "how are you?")

        assert result.ok
        assert result.text == "Hello from Claude"
        assert result.usage["output_tokens"] == 5

        request = captured["request"]
        assert request.method == "POST"
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "sk-ant-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        body = json.loads(request.content)
        assert body == {
            "model": "claude-3-5-sonnet-20241022",
            "max_tokens": 256,
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello"},
                {"role": "user", "content": "how are you?"},
            ],
            "temperature": 0.5,
        }
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_send_overrides(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=success_body())

        provider = make_provider(handler)
        await provider.send([], "hi", model="claude-3-haiku-20240307", max_tokens=64, temperature=0.0)

        assert captured["body"]["model"] == "claude-3-haiku-20240307"
        assert captured["body"]["max_tokens"] == 64
        assert captured["body"]["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_send_empty_content_uses_placeholder(self):
        body = success_body()
        body["content"] = []
        provider = make_provider(lambda request: httpx.Response(200, json=body))

        result = await provider.send([], "hi")

        assert result.ok
        assert result.text == NO_CONTENT_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_send_structured_error(self):
        error_body = {
            "type": "error",
            "error": {"type": "authentication_error", "message": "invalid x-api-key"},
        }
        provider = make_provider(lambda request: httpx.Response(401, json=error_body))

        result = await provider.send([], "hi")

        assert result.kind is ResultKind.UPSTREAM_ERROR
        assert result.text == "invalid x-api-key"
        assert result.status_code == 401
        assert result.text_or_error() == "Claude API Error: invalid x-api-key"

    @pytest.mark.asyncio
    async def test_send_unparseable_error(self):
        provider = make_provider(lambda request: httpx.Response(503, text="upstream unavailable"))

        result = await provider.send([], "hi")

        assert result.kind is ResultKind.UPSTREAM_ERROR
        assert result.text == "HTTP 503: upstream unavailable"
        assert result.status_code == 503

    @pytest.mark.asyncio
    async def test_send_malformed_success_body(self):
        provider = make_provider(lambda request: httpx.Response(200, text="<html>oops</html>"))

        result = await provider.send([], "hi")

        assert result.kind is ResultKind.UPSTREAM_ERROR
        assert "Malformed response body" in result.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], "ok", 42])
    async def test_send_success_body_not_an_object(self, body):
        provider = make_provider(lambda request: httpx.Response(200, json=body))

        result = await provider.send([], "hi")

        assert result.kind is ResultKind.UPSTREAM_ERROR
        assert "Malformed response body" in result.text
        assert result.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [{"text": "x"}, "x", [None], ["x"], [{"type": "text"}]])
    async def test_send_odd_content_shape_uses_placeholder(self, content):
        body = success_body()
        body["content"] = content
        provider = make_provider(lambda request: httpx.Response(200, json=body))

        result = await provider.send([], "hi")

        assert result.ok
        assert result.text == NO_CONTENT_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_send_non_object_usage_is_ignored(self):
        body = success_body("fine")
        body["usage"] = ["not", "a", "dict"]
        provider = make_provider(lambda request: httpx.Response(200, json=body))

        result = await provider.send([], "hi")

        assert result.ok
        assert result.text == "fine"
        assert result.usage == {}

    @pytest.mark.asyncio
    async def test_send_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        provider = make_provider(handler, timeout=5.0)

        result = await provider.send([], "hi")

        assert result.kind is ResultKind.TIMEOUT
        assert "5s" in result.text

    @pytest.mark.asyncio
    async def test_send_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)

        result = await provider.send([], "hi")

        assert result.kind is ResultKind.TRANSPORT_ERROR
        assert result.text == "connection refused"

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        provider = AnthropicProvider(api_key="k", http_client=client)
        await provider.aclose()
        assert client.is_closed


class TestFormatting:
    """Tests for response format instructions."""

    def test_plain_text_unchanged(self):
        assert enhance_message("hello", ResponseFormat.PLAIN_TEXT) == "hello"

    def test_json_instruction(self):
        text = enhance_message("list three colors", ResponseFormat.JSON)
        assert text.startswith("list three colors\n\n")
        assert "valid JSON" in text

    def test_xml_instruction(self):
        text = enhance_message("list three colors", ResponseFormat.XML)
        assert text.startswith("list three colors\n\n")
        assert "valid XML" in text


class TestLLMFactory:
    """Tests for building the provider from settings."""

    def test_create_from_settings(self):
        config = SimpleNamespace(
            anthropic_api_key="sk-ant-x",
            anthropic_api_url="https://proxy.example.com/v1/messages",
            anthropic_version="2023-06-01",
            llm_model="claude-3-opus-20240229",
            llm_temperature=0.2,
            llm_max_tokens=2048,
            llm_timeout_seconds=12.0,
        )
        provider = create_llm_provider(config)
        assert isinstance(provider, AnthropicProvider)
        assert provider.api_key == "sk-ant-x"
        assert provider.api_url == "https://proxy.example.com/v1/messages"
        assert provider.model == "claude-3-opus-20240229"
        assert provider.default_temperature == 0.2
        assert provider.default_max_tokens == 2048
        assert provider.timeout == 12.0
