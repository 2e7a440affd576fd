"""Bounded conversation memory with JSON persistence.

Turns are kept oldest-first. Two budgets apply after every append: a turn count
and an estimated token count (one token per four characters). Pruning drops the
oldest turns first and never drops the newest user message while it is still
waiting for an answer.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from aigenda.agent.turns import (
    AssistantMessage,
    ToolInvocation,
    ToolOutcome,
    Turn,
    UserMessage,
    advance_clock,
    turn_from_dict,
    turn_to_dict,
)
from aigenda.errors import PersistenceError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
DEFAULT_MAX_TURNS = 50
DEFAULT_MAX_CONTEXT_TOKENS = 8000


def estimate_tokens(text: str) -> int:
    return len(text) // 4


class ConversationMemory:
    def __init__(
        self,
        max_turns: int = DEFAULT_MAX_TURNS,
        max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS,
    ) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self.max_context_tokens = max_context_tokens
        self._turns: list[Turn] = []
        self._tokens = 0

    # ── Mutation ─────────────────────────────────────────────

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)
        self._tokens += estimate_tokens(turn.content)
        self._prune()

    def clear(self) -> None:
        self._turns.clear()
        self._tokens = 0

    def _prune(self) -> None:
        protected = self._pending_user_index()
        dropped = 0
        while self._turns and (
            len(self._turns) > self.max_turns or self._tokens > self.max_context_tokens
        ):
            if protected is not None and dropped >= protected:
                break
            removed = self._turns.pop(0)
            self._tokens -= estimate_tokens(removed.content)
            dropped += 1
        if dropped:
            logger.debug("Pruned %d turns (%d left, ~%d tokens)", dropped, len(self), self._tokens)

    def _pending_user_index(self) -> int | None:
        """Index of the newest user message if no assistant turn follows it."""
        for i in range(len(self._turns) - 1, -1, -1):
            turn = self._turns[i]
            if isinstance(turn, AssistantMessage):
                return None
            if isinstance(turn, UserMessage):
                return i
        return None

    # ── Read access ──────────────────────────────────────────

    def context_window(self) -> list[Turn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(list(self._turns))

    @property
    def token_count(self) -> int:
        return self._tokens

    def recent_tool_usage(self, limit: int = 5) -> list[str]:
        """Distinct ``tool.action`` labels of the latest invocations, newest first."""
        used: list[str] = []
        for turn in reversed(self._turns):
            if isinstance(turn, ToolInvocation) and turn.label not in used:
                used.append(turn.label)
                if len(used) >= limit:
                    break
        return used

    # ── Persistence ──────────────────────────────────────────

    def persist(self, path: Path) -> None:
        """Write all turns to ``path`` atomically. Raises PersistenceError."""
        document = {
            "version": FORMAT_VERSION,
            "turns": [turn_to_dict(t) for t in self._turns],
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False, indent=2, default=str)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not save conversation memory to {path}: {e}") from e
        logger.info("Saved %d turns to %s", len(self), path)

    @classmethod
    def load(
        cls,
        path: Path,
        max_turns: int = DEFAULT_MAX_TURNS,
        max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS,
    ) -> ConversationMemory:
        """Load memory from ``path``; absent or unreadable files give an empty memory."""
        memory = cls(max_turns=max_turns, max_context_tokens=max_context_tokens)
        if not path.exists():
            return memory

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
            turns = [turn_from_dict(item) for item in document["turns"]]
            for turn in turns:
                memory.append(turn)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable conversation memory %s: %s", path, e)
            return cls(max_turns=max_turns, max_context_tokens=max_context_tokens)

        if turns:
            # New turns must sort after history even if the wall clock went back
            advance_clock(max(t.timestamp for t in turns))
        return memory


def render_context(turns: list[Turn]) -> str:
    """Render turns as the plain-text history replayed to the model."""
    if not turns:
        return ""
    lines = ["## Conversation History", "Previous messages and tool interactions:", ""]
    for turn in turns:
        if isinstance(turn, UserMessage):
            lines.append(f"User: {turn.content}")
        elif isinstance(turn, AssistantMessage):
            lines.append(f"Assistant: {turn.content}")
        elif isinstance(turn, ToolInvocation):
            params = json.dumps(turn.parameters, ensure_ascii=False, default=str)
            lines.append(f"  → Called {turn.label} with: {params}")
        elif isinstance(turn, ToolOutcome):
            status = "✓" if turn.success else "✗"
            lines.append(
                f"  {status} {turn.tool_name}.{turn.action_name}: "
                f"{turn.result_text} ({turn.duration_ms}ms)"
            )
    return "\n".join(lines)
