"""Tests for the Anthropic adapter with a stubbed client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from studykit.core.exceptions import GenerationError
from studykit.providers.anthropic_text import AnthropicTextGenerator

pytestmark = pytest.mark.unit


def _client(create: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.messages.create = create
    return client


async def test_returns_joined_text_blocks():
    create = AsyncMock(
        return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text="Hello "), SimpleNamespace(type="text", text="world")])
    )
    generator = AnthropicTextGenerator(model="claude-test", max_tokens=100, client=_client(create))

    text = await generator.generate("prompt", system="sys")

    assert text == "Hello world"
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "claude-test"
    assert kwargs["max_tokens"] == 100
    assert kwargs["system"] == "sys"
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]


async def test_api_error_becomes_generation_error():
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    create = AsyncMock(side_effect=anthropic.APIConnectionError(request=request))
    generator = AnthropicTextGenerator(model="claude-test", client=_client(create))

    with pytest.raises(GenerationError):
        await generator.generate("prompt")

    assert create.await_count == 1


async def test_empty_completion_rejected():
    create = AsyncMock(return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text="  ")]))
    generator = AnthropicTextGenerator(model="claude-test", client=_client(create))

    with pytest.raises(GenerationError):
        await generator.generate("prompt")
