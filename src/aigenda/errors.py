"""Exception hierarchy.

Only ``CompletionError`` aborts an agent run. ``ToolError`` is absorbed into a
failed tool outcome, ``PersistenceError`` is logged.
"""

from __future__ import annotations


class AigendaError(Exception):
    """Base class for all aigenda errors."""


# ── Completion service (fatal) ────────────────────────────────


class CompletionError(AigendaError):
    """The completion service could not produce a response."""


class TransportError(CompletionError):
    """Network failure, timeout or unusable response from the service."""


class AuthError(CompletionError):
    """Missing or rejected API credential."""


# ── Tool dispatch (recovered per invocation) ──────────────────


class ToolError(AigendaError):
    """An invocation could not be dispatched or its capability failed."""


class UnknownTool(ToolError):
    def __init__(self, name: object, available: list[str] | None = None) -> None:
        self.name = name
        msg = f"Unknown tool: {name!r}"
        if available:
            msg += f" (available: {', '.join(available)})"
        super().__init__(msg)


class UnknownAction(ToolError):
    def __init__(self, tool: str, action: object) -> None:
        self.tool = tool
        self.action = action
        super().__init__(f"Unknown action {action!r} for tool '{tool}'")


class MissingParameter(ToolError):
    def __init__(self, tool: str, action: str, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(f"Missing required parameter '{parameter}' for {tool}.{action}")


class InvalidParameter(ToolError):
    def __init__(self, parameter: str, reason: str) -> None:
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid parameter '{parameter}': {reason}")


class CapabilityFailed(ToolError):
    """A capability raised while executing a validated invocation."""


# ── Local state ───────────────────────────────────────────────


class StorageError(AigendaError):
    """Reading or writing a day log failed."""


class PersistenceError(AigendaError):
    """Saving conversation memory failed."""
