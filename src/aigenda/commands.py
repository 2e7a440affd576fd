"""Command implementations behind the CLI subcommands."""

from __future__ import annotations

import logging
import sys
from datetime import date
from typing import TextIO

from aigenda.agent.confirmation import AutoApproveGate, ConsoleConfirmationGate
from aigenda.agent.memory import ConversationMemory
from aigenda.agent.orchestrator import Agent
from aigenda.agent.registry import CapabilityRegistry
from aigenda.agent.turns import AssistantMessage, ToolOutcome, Turn
from aigenda.config import AigendaConfig
from aigenda.engines.anthropic_api import AnthropicCompletionClient
from aigenda.errors import AuthError, CompletionError
from aigenda.models import DayLog, Note
from aigenda.storage.base import Storage
from aigenda.storage.fs import FsStorage
from aigenda.tools.notes import NotesCapability

logger = logging.getLogger(__name__)


# ── Notes ────────────────────────────────────────────────────


def run_add(storage: Storage, words: list[str], out: TextIO = sys.stdout) -> int:
    text = " ".join(words).strip()
    if not text:
        print("Nothing to add.", file=sys.stderr)
        return 1
    today = date.today()
    log = storage.load_day(today)
    log.add(Note(text=text))
    storage.save_day(log)
    print(f"Added note to {log.date.isoformat()}.", file=out)
    return 0


def run_list(
    storage: Storage,
    all_days: bool = False,
    day: str | None = None,
    out: TextIO = sys.stdout,
) -> int:
    if all_days:
        for log in storage.iterate_days():
            _print_day(log, out)
        return 0
    target = date.fromisoformat(day) if day else date.today()
    _print_day(storage.load_day(target), out)
    return 0


def _print_day(log: DayLog, out: TextIO) -> None:
    if not log.notes:
        print(f"(no notes) {log.date.isoformat()}", file=out)
        return
    print(f"# {log.date.isoformat()}", file=out)
    for i, note in enumerate(log.notes, 1):
        print(f"- [{i:02}] {note.text}", file=out)
    print(file=out)


# ── Agent ────────────────────────────────────────────────────


def build_registry(storage: Storage) -> CapabilityRegistry:
    registry = CapabilityRegistry()
    registry.register(NotesCapability(storage))
    return registry


class ConsoleRenderer:
    """Prints assistant replies and tool results as the run records them."""

    def __init__(self, out: TextIO = sys.stdout) -> None:
        self._out = out

    def __call__(self, turn: Turn) -> None:
        if isinstance(turn, AssistantMessage):
            if turn.iteration > 1:
                print("\n---", file=self._out)
            print(f"\n{turn.content}", file=self._out)
        elif isinstance(turn, ToolOutcome):
            status = "✓" if turn.success else "✗"
            print(
                f"{status} {turn.tool_name}.{turn.action_name}: {turn.result_text}",
                file=self._out,
            )


async def run_agent(
    config: AigendaConfig,
    words: list[str],
    *,
    assume_yes: bool = False,
    out: TextIO = sys.stdout,
) -> int:
    request = " ".join(words).strip()
    if not request:
        print("Usage: aigenda ai <your natural language command>", file=out)
        print('Example: aigenda ai "add a note about today\'s meeting"', file=out)
        return 1

    storage = FsStorage(config.notes_dir)
    registry = build_registry(storage)
    memory = ConversationMemory.load(
        config.memory_file,
        max_turns=config.agent.max_turns,
        max_context_tokens=config.agent.max_context_tokens,
    )
    client = AnthropicCompletionClient(
        api_key=config.api_key,
        model=config.agent.model,
        max_tokens=config.agent.max_tokens,
        timeout=config.agent.timeout,
    )
    gate = AutoApproveGate() if assume_yes else ConsoleConfirmationGate(stdout=out)
    agent = Agent(
        client,
        registry,
        memory,
        gate,
        memory_path=config.memory_file,
        max_iterations=config.agent.max_iterations,
        on_turn=ConsoleRenderer(out),
    )

    try:
        await agent.run(request)
    except CompletionError as e:
        print(f"Error: {e}", file=sys.stderr)
        if isinstance(e, AuthError):
            print("Set the ANTHROPIC_API_KEY environment variable.", file=sys.stderr)
        print("Available tools:", file=sys.stderr)
        for name in registry.names():
            print(f"  - {name}", file=sys.stderr)
        return 1
    return 0
