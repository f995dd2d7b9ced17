"""
Generator client - the single outbound call to the generative model

Talks to any OpenAI-compatible chat completions endpoint (Gemini's is the
default). Exactly one request per diagnostic: no retries, bounded by a timeout.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import openai
from openai import AsyncOpenAI

from core.environment import GeneratorSettings
from models.schemas import PromptPair
from services.error_types import GeneratorTimeoutError, UpstreamParseError, UpstreamTransportError

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_MESSAGE = "Empty response content from generator"

AVAILABLE_MODELS: List[Dict[str, str]] = [
    {
        "id": "gemini-3-flash-preview",
        "name": "Gemini 3 Flash (Preview)",
        "description": "Latest and fastest model with 1M context window"
    },
    {
        "id": "gemini-2.5-flash-preview-05-20",
        "name": "Gemini 2.5 Flash",
        "description": "Fast and efficient with excellent reasoning"
    },
    {
        "id": "gemini-2.5-pro-preview-05-06",
        "name": "Gemini 2.5 Pro",
        "description": "Best quality for complex tasks"
    },
    {
        "id": "gemini-2.0-flash",
        "name": "Gemini 2.0 Flash",
        "description": "Stable release with multimodal support"
    },
]


def available_models() -> List[Dict[str, str]]:
    """Model ids a caller may choose from"""
    return [dict(model) for model in AVAILABLE_MODELS]


@runtime_checkable
class GeneratorClient(Protocol):
    """Anything that can turn a prompt pair into raw model text"""

    async def generate(self, prompt: PromptPair, model_id: str) -> str:
        ...


class OpenAICompatibleGenerator:
    """
    GeneratorClient backed by the openai SDK.

    The API key is handed straight to the SDK client and is never logged.
    """

    def __init__(self, settings: GeneratorSettings, client: Optional[AsyncOpenAI] = None):
        self.settings = settings
        self.client = client or AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            max_retries=0
        )

    async def generate(self, prompt: PromptPair, model_id: str) -> str:
        """
        Send one chat completion request and return the model's text

        Raises:
            UpstreamTransportError: non-success status or connection failure
            GeneratorTimeoutError: no answer within the configured timeout
            UpstreamParseError: the model answered with no text
        """
        request: Dict[str, Any] = {
            "model": model_id,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user}
            ],
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_output_tokens,
            "response_format": {"type": "json_object"},
        }

        logger.debug(
            f"Calling generator model={model_id} stream={self.settings.stream} "
            f"prompt_chars={len(prompt.system) + len(prompt.user)}"
        )

        try:
            if self.settings.stream:
                content = await self._generate_streamed(request)
            else:
                content = await self._generate_once(request)
        except openai.APITimeoutError as e:
            raise GeneratorTimeoutError(
                f"Generator request timed out after {self.settings.timeout_seconds:g}s"
            ) from e
        except openai.APIStatusError as e:
            body = e.response.text if e.response is not None else str(e.body or "")
            raise UpstreamTransportError(
                f"Generator API error ({e.status_code}): {body}",
                status_code=e.status_code,
                body=body
            ) from e
        except openai.APIConnectionError as e:
            raise UpstreamTransportError(f"Generator connection failed: {e}") from e

        if not content:
            raise UpstreamParseError(EMPTY_RESPONSE_MESSAGE)

        logger.debug(f"Generator returned {len(content)} chars")
        return content

    async def _generate_once(self, request: Dict[str, Any]) -> str:
        response = await self.client.chat.completions.create(**request)
        if not response.choices:
            raise UpstreamParseError(EMPTY_RESPONSE_MESSAGE)
        return response.choices[0].message.content or ""

    async def _generate_streamed(self, request: Dict[str, Any]) -> str:
        # Chunks are concatenated in arrival order; nothing is parsed until the stream ends
        parts: List[str] = []
        stream = await self.client.chat.completions.create(stream=True, **request)
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                parts.append(chunk.choices[0].delta.content)
        return "".join(parts)

    async def aclose(self):
        await self.client.close()
