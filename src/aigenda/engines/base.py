"""Completion client protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from aigenda.agent.turns import Turn


@runtime_checkable
class CompletionClient(Protocol):
    """Protocol that all completion backends must implement."""

    @property
    def name(self) -> str: ...

    async def complete(
        self,
        prompt: str,
        context: list[Turn],
        *,
        system_prompt: str | None = None,
    ) -> str:
        """Send ``prompt`` with the replayed ``context`` and return the response text.

        Raises TransportError or AuthError; never retries.
        """
        ...
