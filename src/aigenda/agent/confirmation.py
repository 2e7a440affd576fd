"""Operator confirmation before a tool runs."""

from __future__ import annotations

import json
import logging
import sys
from enum import Enum
from typing import Protocol, TextIO, runtime_checkable

from aigenda.agent.turns import ToolInvocation

logger = logging.getLogger(__name__)

_AFFIRMATIVE = ("y", "yes")


class Decision(str, Enum):
    PROCEED = "proceed"
    DECLINE = "decline"


@runtime_checkable
class ConfirmationGate(Protocol):
    def confirm(self, invocation: ToolInvocation) -> Decision: ...


class ConsoleConfirmationGate:
    """Ask on the terminal; anything but an explicit yes declines."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    def confirm(self, invocation: ToolInvocation) -> Decision:
        out = self._stdout
        if invocation.parameters in (None, {}):
            params = "none"
        else:
            params = json.dumps(invocation.parameters, indent=2, ensure_ascii=False, default=str)

        out.write("\nAgent wants to execute a tool:\n")
        out.write(f"   Tool: {invocation.tool_name}\n")
        out.write(f"   Action: {invocation.action_name}\n")
        out.write(f"   Parameters: {params}\n")
        out.write("\nDo you want to proceed? [y/N]: ")
        out.flush()

        line = self._stdin.readline()
        if line.strip().lower() in _AFFIRMATIVE:
            out.write("Tool execution approved.\n")
            return Decision.PROCEED
        out.write("Tool execution cancelled.\n")
        return Decision.DECLINE


class AutoApproveGate:
    """Proceed with every invocation (``aigenda ai --yes``)."""

    def confirm(self, invocation: ToolInvocation) -> Decision:
        logger.info("Auto-approving %s", invocation.label)
        return Decision.PROCEED
