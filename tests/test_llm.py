"""
Unit tests for the LLM module.
Tests LLMMessage, LLMResponse, providers, and factory.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, patch, MagicMock

from oshpaz.config.settings import Settings
from oshpaz.llm.base import LLMError, LLMMessage, LLMResponse, parse_json_object
from oshpaz.llm.openai_provider import OpenAIProvider
from oshpaz.llm.volcengine_provider import VolcEngineProvider
from oshpaz.llm.factory import create_llm_provider, create_provider_from_settings


def mock_async_client(mock_client, response):
    mock_instance = AsyncMock()
    mock_instance.post.return_value = response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_client.return_value = mock_instance
    return mock_instance


class TestLLMMessage:
    """Tests for LLMMessage dataclass."""

    def test_text_message(self):
        msg = LLMMessage.text("user", "Hello")
        assert msg.role == "user"
        assert msg.content == "Hello"

    def test_image_message(self):
        msg = LLMMessage.image("user", "Analyze", "abc123", "image/png")
        assert isinstance(msg.content, list)
        assert len(msg.content) == 2
        assert msg.content[0]["type"] == "image_url"
        assert msg.content[0]["image_url"]["url"] == "data:image/png;base64,abc123"
        assert msg.content[1] == {"type": "text", "text": "Analyze"}


class TestLLMResponse:
    """Tests for LLMResponse dataclass."""

    def test_basic_response(self):
        resp = LLMResponse(content="Hello!", model="gpt-4o")
        assert resp.content == "Hello!"
        assert resp.model == "gpt-4o"
        assert resp.usage == {}
        assert resp.raw is None

    def test_json_plain(self):
        resp = LLMResponse(content='{"grade": "A"}')
        assert resp.json() == {"grade": "A"}

    def test_json_inside_code_fence(self):
        resp = LLMResponse(content='```json\n{"items": []}\n```')
        assert resp.json() == {"items": []}

    def test_json_array_rejected(self):
        with pytest.raises(ValueError):
            parse_json_object("[1, 2]")

    def test_json_garbage_rejected(self):
        with pytest.raises(ValueError):
            LLMResponse(content="not json").json()


class TestOpenAIProvider:
    """Tests for OpenAI-compatible provider."""

    def test_init_defaults(self):
        provider = OpenAIProvider(api_key="test-key")
        assert provider.api_key == "test-key"
        assert provider.model == "gpt-4o"
        assert provider.base_url == "https://api.openai.com/v1"

    def test_init_custom(self):
        provider = OpenAIProvider(
            api_key="key",
            model="gpt-4o-mini",
            base_url="https://custom.api.com/v1/"
        )
        assert provider.model == "gpt-4o-mini"
        assert provider.base_url == "https://custom.api.com/v1"

    def test_format_messages(self):
        provider = OpenAIProvider(api_key="test")
        messages = [
            LLMMessage.text("system", "sys prompt"),
            LLMMessage.text("user", "hello")
        ]
        formatted = provider._format_messages(messages)
        assert formatted == [
            {"role": "system", "content": "sys prompt"},
            {"role": "user", "content": "hello"},
        ]

    def test_headers(self):
        provider = OpenAIProvider(api_key="sk-test123")
        headers = provider._get_headers()
        assert headers["Authorization"] == "Bearer sk-test123"
        assert headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_chat_completion_success(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "choices": [{"message": {"content": "Test response"}}],
            "model": "gpt-4o",
            "usage": {"prompt_tokens": 10, "completion_tokens": 5}
        }
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient") as mock_client:
            instance = mock_async_client(mock_client, mock_response)

            result = await provider.chat_completion([LLMMessage.text("user", "Hello")])

            assert result.content == "Test response"
            assert result.model == "gpt-4o"
            assert result.usage["prompt_tokens"] == 10
            payload = instance.post.call_args.kwargs["json"]
            assert "response_format" not in payload

    @pytest.mark.asyncio
    async def test_chat_completion_json_mode(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "choices": [{"message": {"content": '{"items": []}'}}],
            "model": "gpt-4o",
        }
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient") as mock_client:
            instance = mock_async_client(mock_client, mock_response)

            result = await provider.chat_completion(
                [LLMMessage.text("user", "Hello")], temperature=0.3, max_tokens=800, json_mode=True
            )

            payload = instance.post.call_args.kwargs["json"]
            assert payload["response_format"] == {"type": "json_object"}
            assert payload["temperature"] == 0.3
            assert payload["max_tokens"] == 800
            assert result.json() == {"items": []}

    @pytest.mark.asyncio
    async def test_http_error_is_raised(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "boom", request=MagicMock(), response=MagicMock(status_code=500)
        )

        with patch("httpx.AsyncClient") as mock_client:
            mock_async_client(mock_client, mock_response)

            with pytest.raises(httpx.HTTPStatusError):
                await provider.chat_completion([LLMMessage.text("user", "Hello")])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"error": {"message": "The server is overloaded", "type": "server_error"}},
        {"choices": []},
        {"choices": [{"finish_reason": "length"}]},
        {"choices": [{"message": {"content": [{"type": "text"}]}}]},
        ["not", "an", "object"],
    ])
    async def test_malformed_body_raises_llm_error(self, body):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = body

        with patch("httpx.AsyncClient") as mock_client:
            mock_async_client(mock_client, mock_response)

            with pytest.raises(LLMError):
                await provider.chat_completion([LLMMessage.text("user", "Hello")])

    @pytest.mark.asyncio
    async def test_non_json_body_raises_llm_error(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.side_effect = ValueError("Expecting value")

        with patch("httpx.AsyncClient") as mock_client:
            mock_async_client(mock_client, mock_response)

            with pytest.raises(LLMError):
                await provider.chat_completion([LLMMessage.text("user", "Hello")])


class TestVolcEngineProvider:
    """Tests for Volcano Engine provider."""

    def test_init_defaults(self):
        provider = VolcEngineProvider(api_key="test-key")
        assert provider.api_key == "test-key"
        assert provider.provider_name == "volcengine"
        assert "volces.com" in provider.base_url

    @pytest.mark.asyncio
    async def test_chat_completion_success(self):
        provider = VolcEngineProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = {
            "choices": [{"message": {"content": "Salom"}}],
            "model": "doubao-1.5-vision-pro-32k",
            "usage": {}
        }
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient") as mock_client:
            mock_async_client(mock_client, mock_response)

            result = await provider.chat_completion([LLMMessage.text("user", "Salom")])

            assert result.content == "Salom"


class TestLLMFactory:
    """Tests for LLM provider factory."""

    def test_create_openai_provider(self):
        provider = create_llm_provider(provider="openai", api_key="test-key", model="gpt-4o")
        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o"

    def test_create_volcengine_provider(self):
        provider = create_llm_provider(provider="volcengine", api_key="test-key")
        assert isinstance(provider, VolcEngineProvider)

    def test_no_api_key_returns_none(self):
        assert create_llm_provider(provider="openai", api_key="") is None

    def test_unsupported_provider_raises(self):
        with pytest.raises(ValueError, match="Unsupported"):
            create_llm_provider(provider="unsupported", api_key="key")

    def test_from_settings_accepts_legacy_openai_key(self):
        settings = Settings(llm_provider="openai", llm_api_key=None, openai_api_key="sk-legacy",
                            log_llm_calls=False)
        provider = create_provider_from_settings(settings)
        assert isinstance(provider, OpenAIProvider)
        assert provider.api_key == "sk-legacy"
        assert provider.log_calls is False

    def test_from_settings_without_key(self):
        settings = Settings(llm_provider="volcengine", llm_api_key=None, openai_api_key="sk-legacy")
        assert create_provider_from_settings(settings) is None
