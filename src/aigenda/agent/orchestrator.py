"""Agent orchestrator — the bounded chain-of-thought loop.

One run:
1. Record the user message
2. Build a prompt (initial, or continuation with the latest tool outcomes)
3. Await the completion service (the only fatal step)
4. Record the assistant reply and extract tool invocations from it
5. For each invocation, in order: confirm, dispatch or cancel, record the outcome
6. Loop while the reply signals more work and the iteration cap allows
7. Persist memory and return every turn recorded since step 1
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from aigenda.agent.confirmation import Decision
from aigenda.agent.continuation import should_continue
from aigenda.agent.parser import extract_invocations
from aigenda.agent.prompts import SYSTEM_PROMPT, build_continuation_prompt, build_initial_prompt
from aigenda.agent.turns import AssistantMessage, ToolInvocation, ToolOutcome, Turn, UserMessage
from aigenda.errors import CompletionError, PersistenceError, ToolError

if TYPE_CHECKING:
    from aigenda.agent.confirmation import ConfirmationGate
    from aigenda.agent.memory import ConversationMemory
    from aigenda.agent.registry import CapabilityRegistry
    from aigenda.engines.base import CompletionClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5

# Called for every recorded turn, in order
TurnCallback = Callable[[Turn], None]


class Agent:
    """Drives one request through prompt → completion → tools → continuation."""

    def __init__(
        self,
        client: CompletionClient,
        registry: CapabilityRegistry,
        memory: ConversationMemory,
        gate: ConfirmationGate,
        *,
        memory_path: Path | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        on_turn: TurnCallback | None = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.client = client
        self.registry = registry
        self.memory = memory
        self.gate = gate
        self.memory_path = memory_path
        self.max_iterations = max_iterations
        self.on_turn = on_turn
        self._produced: list[Turn] = []

    async def run(self, request: str) -> list[Turn]:
        """Process ``request`` and return the turns it produced.

        Raises CompletionError if the completion service fails; memory is still
        saved (best effort) before the error propagates.
        """
        self._produced = []
        self._record(UserMessage(request))

        previous: AssistantMessage | None = None
        outcomes: list[ToolOutcome] = []
        iteration = 0

        while True:
            iteration += 1
            logger.info("Iteration %d/%d", iteration, self.max_iterations)

            if previous is None:
                prompt = build_initial_prompt(
                    request, self.registry, self.memory.recent_tool_usage()
                )
            else:
                prompt = build_continuation_prompt(request, previous, outcomes, self.registry)

            try:
                text = await self.client.complete(
                    prompt, self.memory.context_window(), system_prompt=SYSTEM_PROMPT
                )
            except CompletionError:
                logger.error("Completion failed on iteration %d, aborting run", iteration)
                self._save()
                raise

            previous = AssistantMessage(text, iteration=iteration)
            self._record(previous)
            outcomes = []
            for raw in extract_invocations(text):
                outcomes.append(await self._handle_invocation(ToolInvocation.from_raw(raw)))

            if iteration >= self.max_iterations:
                if should_continue(text):
                    logger.warning("Iteration cap (%d) reached, stopping", self.max_iterations)
                break
            if not should_continue(text):
                break

        self._save()
        return list(self._produced)

    async def _handle_invocation(self, invocation: ToolInvocation) -> ToolOutcome:
        self._record(invocation)

        decision = await asyncio.to_thread(self.gate.confirm, invocation)
        if decision is not Decision.PROCEED:
            logger.info("Declined %s", invocation.label)
            outcome = ToolOutcome.cancelled(invocation)
            self._record(outcome)
            return outcome

        start = time.monotonic()
        try:
            result = self.registry.execute(invocation)
            success = True
        except ToolError as e:
            logger.warning("Tool call %s failed: %s", invocation.label, e)
            result = f"Error: {e}"
            success = False
        duration_ms = int((time.monotonic() - start) * 1000)

        outcome = ToolOutcome(
            invocation_id=invocation.id,
            tool_name=invocation.tool_name,
            action_name=invocation.action_name,
            result_text=result,
            success=success,
            duration_ms=duration_ms,
        )
        self._record(outcome)
        return outcome

    def _record(self, turn: Turn) -> None:
        self.memory.append(turn)
        self._produced.append(turn)
        if self.on_turn is not None:
            self.on_turn(turn)

    def _save(self) -> None:
        if self.memory_path is None:
            return
        try:
            self.memory.persist(self.memory_path)
        except PersistenceError as e:
            logger.warning("%s", e)
