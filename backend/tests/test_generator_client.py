"""
Tests for the OpenAI-compatible generator client (SDK client mocked, no network)
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from core.environment import GeneratorSettings
from models.schemas import PromptPair
from services.error_types import GeneratorTimeoutError, UpstreamParseError, UpstreamTransportError
from services.generator_client import (
    AVAILABLE_MODELS,
    GeneratorClient,
    OpenAICompatibleGenerator,
    available_models,
)

PROMPT = PromptPair(system="system text", user="user text")
REQUEST = httpx.Request("POST", "https://generator.test/v1/chat/completions")


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def chunk(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


def make_client(**create_kwargs):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    client.close = AsyncMock()
    return client


class TestOpenAICompatibleGenerator:

    @pytest.fixture
    def settings(self):
        return GeneratorSettings(api_key="test-key", temperature=0.3, max_output_tokens=4000)

    @pytest.mark.asyncio
    async def test_returns_message_content(self, settings):
        client = make_client(return_value=completion('{"summary": "ok"}'))
        generator = OpenAICompatibleGenerator(settings, client=client)

        assert await generator.generate(PROMPT, "gemini-2.0-flash") == '{"summary": "ok"}'

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 4000
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_streamed_chunks_concatenated_in_order(self, settings):
        async def stream():
            for text in ['{"summ', None, 'ary": ', '"ok"}']:
                yield chunk(text)

        client = make_client(return_value=stream())
        generator = OpenAICompatibleGenerator(
            GeneratorSettings(api_key="test-key", stream=True), client=client
        )

        assert await generator.generate(PROMPT, "gemini-2.0-flash") == '{"summary": "ok"}'
        assert client.chat.completions.create.call_args.kwargs["stream"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [completion(None), completion(""), SimpleNamespace(choices=[])])
    async def test_empty_content(self, settings, response):
        generator = OpenAICompatibleGenerator(settings, client=make_client(return_value=response))
        with pytest.raises(UpstreamParseError, match="Empty response content from generator"):
            await generator.generate(PROMPT, "gemini-2.0-flash")

    @pytest.mark.asyncio
    async def test_status_error_carries_code_and_body(self, settings):
        error = openai.APIStatusError(
            "Too Many Requests",
            response=httpx.Response(429, request=REQUEST, text="quota exceeded"),
            body=None
        )
        generator = OpenAICompatibleGenerator(settings, client=make_client(side_effect=error))

        with pytest.raises(UpstreamTransportError) as exc_info:
            await generator.generate(PROMPT, "gemini-2.0-flash")

        assert exc_info.value.status_code == 429
        assert exc_info.value.body == "quota exceeded"
        assert exc_info.value.message == "Generator API error (429): quota exceeded"

    @pytest.mark.asyncio
    async def test_timeout(self, settings):
        generator = OpenAICompatibleGenerator(
            settings, client=make_client(side_effect=openai.APITimeoutError(request=REQUEST))
        )
        with pytest.raises(GeneratorTimeoutError):
            await generator.generate(PROMPT, "gemini-2.0-flash")

    @pytest.mark.asyncio
    async def test_connection_error(self, settings):
        generator = OpenAICompatibleGenerator(
            settings, client=make_client(side_effect=openai.APIConnectionError(request=REQUEST))
        )
        with pytest.raises(UpstreamTransportError) as exc_info:
            await generator.generate(PROMPT, "gemini-2.0-flash")
        assert exc_info.value.status_code is None
        assert not isinstance(exc_info.value, GeneratorTimeoutError)

    @pytest.mark.asyncio
    async def test_aclose(self, settings):
        client = make_client(return_value=completion("{}"))
        await OpenAICompatibleGenerator(settings, client=client).aclose()
        client.close.assert_awaited_once()

    def test_default_client_never_retries(self, settings):
        generator = OpenAICompatibleGenerator(settings)
        assert generator.client.max_retries == 0
        assert str(generator.client.base_url) == settings.base_url

    def test_satisfies_protocol(self, settings):
        assert isinstance(OpenAICompatibleGenerator(settings, client=make_client()), GeneratorClient)


def test_available_models_is_a_copy():
    models = available_models()
    assert [model["id"] for model in models] == [model["id"] for model in AVAILABLE_MODELS]
    assert "gemini-2.0-flash" in [model["id"] for model in models]
    models[0]["id"] = "changed"
    assert AVAILABLE_MODELS[0]["id"] != "changed"
