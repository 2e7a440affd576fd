"""Tests for the Anthropic completion client (mocked SDK calls)."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from aigenda.agent.turns import AssistantMessage, UserMessage
from aigenda.engines.anthropic_api import AnthropicCompletionClient
from aigenda.engines.base import CompletionClient
from aigenda.errors import AuthError, TransportError

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _response(*texts: str) -> SimpleNamespace:
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=t) for t in texts],
        usage=None,
        model="claude-sonnet-4-5-20250929",
    )


def _status_error(cls, status: int):
    return cls(
        "rejected",
        response=httpx.Response(status, request=_REQUEST),
        body=None,
    )


class TestAnthropicCompletionClient:
    @pytest.fixture
    def client(self) -> AnthropicCompletionClient:
        c = AnthropicCompletionClient(api_key="sk-test", model="claude-test", max_tokens=256)
        c._client = MagicMock()
        c._client.messages.create.return_value = _response("Hello", " there")
        return c

    def test_name(self, client: AnthropicCompletionClient):
        assert client.name == "anthropic_api"
        assert isinstance(client, CompletionClient)

    def test_key_hidden_from_repr(self, client: AnthropicCompletionClient):
        assert "sk-test" not in repr(client)

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self, client: AnthropicCompletionClient):
        text = await client.complete("Hi", [])
        assert text == "Hello there"

        kwargs = client._client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 256
        assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]
        assert "system" not in kwargs

    @pytest.mark.asyncio
    async def test_non_text_blocks_ignored(self, client: AnthropicCompletionClient):
        client._client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(type="thinking", thinking="hmm"), SimpleNamespace(type="text", text="ok")],
            usage=None,
            model="m",
        )
        assert await client.complete("Hi", []) == "ok"

    @pytest.mark.asyncio
    async def test_system_prompt(self, client: AnthropicCompletionClient):
        await client.complete("Hi", [], system_prompt="Be brief.")
        assert client._client.messages.create.call_args.kwargs["system"] == "Be brief."

    @pytest.mark.asyncio
    async def test_context_wrapped(self, client: AnthropicCompletionClient):
        await client.complete("Now?", [UserMessage("earlier"), AssistantMessage("reply")])
        content = client._client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content.startswith("<context>\n")
        assert "User: earlier" in content
        assert "Assistant: reply" in content
        assert content.endswith("</context>\n\nNow?")

    @pytest.mark.asyncio
    async def test_missing_key(self):
        client = AnthropicCompletionClient(api_key="")
        with pytest.raises(AuthError, match="ANTHROPIC_API_KEY"):
            await client.complete("Hi", [])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, expected",
        [
            (_status_error(anthropic.AuthenticationError, 401), AuthError),
            (_status_error(anthropic.PermissionDeniedError, 403), AuthError),
            (_status_error(anthropic.InternalServerError, 500), TransportError),
            (_status_error(anthropic.RateLimitError, 429), TransportError),
            (anthropic.APIConnectionError(request=_REQUEST), TransportError),
            (anthropic.APITimeoutError(request=_REQUEST), TransportError),
        ],
    )
    async def test_sdk_errors_mapped(self, client: AnthropicCompletionClient, error, expected):
        client._client.messages.create.side_effect = error
        with pytest.raises(expected):
            await client.complete("Hi", [])

    @pytest.mark.asyncio
    async def test_empty_content(self, client: AnthropicCompletionClient):
        client._client.messages.create.return_value = _response()
        with pytest.raises(TransportError, match="no text content"):
            await client.complete("Hi", [])
