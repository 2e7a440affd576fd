"""Anthropic Messages API completion client."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import anthropic

from aigenda.agent.memory import render_context
from aigenda.errors import AuthError, TransportError

if TYPE_CHECKING:
    from aigenda.agent.turns import Turn

logger = logging.getLogger(__name__)


@dataclass
class AnthropicCompletionClient:
    """Direct Anthropic API via the `anthropic` SDK. Plain text in, plain text out."""

    api_key: str = field(repr=False)
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 1024
    timeout: int = 120

    def __post_init__(self) -> None:
        self._client: Any = None
        if self.api_key:
            # Retries are the caller's decision
            self._client = anthropic.Anthropic(
                api_key=self.api_key,
                timeout=float(self.timeout),
                max_retries=0,
            )

    @property
    def name(self) -> str:
        return "anthropic_api"

    async def complete(
        self,
        prompt: str,
        context: list[Turn],
        *,
        system_prompt: str | None = None,
    ) -> str:
        if self._client is None:
            raise AuthError("ANTHROPIC_API_KEY environment variable not set")

        history = render_context(context)
        full_prompt = f"<context>\n{history}\n</context>\n\n{prompt}" if history else prompt

        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": full_prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await asyncio.to_thread(self._client.messages.create, **kwargs)
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            logger.error("Anthropic API rejected credentials: %s", e)
            raise AuthError(f"Anthropic API rejected the API key: {e}") from e
        except anthropic.APITimeoutError as e:
            raise TransportError(f"Anthropic API timeout after {self.timeout}s") from e
        except anthropic.APIConnectionError as e:
            raise TransportError(f"Anthropic API connection failed: {e}") from e
        except anthropic.APIStatusError as e:
            raise TransportError(f"Anthropic API request failed with status {e.status_code}: {e}") from e
        except anthropic.APIError as e:
            raise TransportError(f"Anthropic API error: {e}") from e

        text = "".join(
            block.text for block in (response.content or []) if getattr(block, "type", "") == "text"
        )
        if not text:
            raise TransportError("Unexpected response format from Anthropic API (no text content)")

        if response.usage:
            logger.info(
                "Completion: %d input / %d output tokens (model=%s)",
                response.usage.input_tokens,
                response.usage.output_tokens,
                response.model,
            )
        return text
