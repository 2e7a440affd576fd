"""Conversation turn types.

A turn is one of four immutable records appended to conversation memory in the
order they happen. That order is replayed verbatim to the completion service.
"""

from __future__ import annotations

import json
import threading
import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Union

CANCELLED = "cancelled"

_clock_lock = threading.Lock()
_last_timestamp: datetime | None = None


def next_timestamp() -> datetime:
    """Current UTC time, nudged forward so no two turns share a timestamp."""
    global _last_timestamp
    with _clock_lock:
        now = datetime.now(timezone.utc)
        if _last_timestamp is not None and now <= _last_timestamp:
            now = _last_timestamp + timedelta(microseconds=1)
        _last_timestamp = now
        return now


def advance_clock(timestamp: datetime) -> None:
    """Make every later :func:`next_timestamp` result come after ``timestamp``."""
    global _last_timestamp
    with _clock_lock:
        if _last_timestamp is None or timestamp > _last_timestamp:
            _last_timestamp = timestamp


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class UserMessage:
    content: str
    timestamp: datetime = field(default_factory=next_timestamp)

    role: ClassVar[str] = "user"


@dataclass(frozen=True)
class AssistantMessage:
    content: str
    iteration: int = 1
    timestamp: datetime = field(default_factory=next_timestamp)

    role: ClassVar[str] = "assistant"


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call extracted from assistant output.

    ``tool_name`` and ``action_name`` keep whatever the model wrote, even a
    non-string; the registry decides whether the call is valid.
    """

    tool_name: Any
    action_name: Any
    parameters: Any = field(default_factory=dict)
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=next_timestamp)

    role: ClassVar[str] = "tool_call"

    @classmethod
    def from_raw(cls, raw: dict) -> ToolInvocation:
        params = raw.get("parameters")
        return cls(
            tool_name=raw.get("tool"),
            action_name=raw.get("action"),
            parameters={} if params is None else params,
        )

    @property
    def label(self) -> str:
        return f"{self.tool_name}.{self.action_name}"

    @property
    def content(self) -> str:
        return json.dumps(
            {"tool": self.tool_name, "action": self.action_name, "parameters": self.parameters},
            ensure_ascii=False,
            default=str,
        )


@dataclass(frozen=True)
class ToolOutcome:
    invocation_id: str
    tool_name: Any
    action_name: Any
    result_text: str
    success: bool
    duration_ms: int = 0
    timestamp: datetime = field(default_factory=next_timestamp)

    role: ClassVar[str] = "tool_result"

    @classmethod
    def cancelled(cls, invocation: ToolInvocation) -> ToolOutcome:
        return cls(
            invocation_id=invocation.id,
            tool_name=invocation.tool_name,
            action_name=invocation.action_name,
            result_text=CANCELLED,
            success=False,
        )

    @property
    def is_cancelled(self) -> bool:
        return not self.success and self.result_text == CANCELLED

    @property
    def content(self) -> str:
        return self.result_text


Turn = Union[UserMessage, AssistantMessage, ToolInvocation, ToolOutcome]

_TURN_TYPES: dict[str, type] = {
    t.role: t for t in (UserMessage, AssistantMessage, ToolInvocation, ToolOutcome)
}


def turn_to_dict(turn: Turn) -> dict[str, Any]:
    """Serialize a turn to a JSON-compatible dict tagged with its role."""
    data: dict[str, Any] = {"role": turn.role}
    for f in fields(turn):
        value = getattr(turn, f.name)
        data[f.name] = value.isoformat() if isinstance(value, datetime) else value
    return data


def turn_from_dict(data: dict[str, Any]) -> Turn:
    """Inverse of :func:`turn_to_dict`. Raises KeyError/TypeError/ValueError on bad input."""
    values = dict(data)
    role = values.pop("role")
    cls = _TURN_TYPES.get(role)
    if cls is None:
        raise ValueError(f"Unknown turn role: {role!r}")
    for name, expected in _FIELD_TYPES.items():
        if name in values and not _is_instance(values[name], expected):
            raise TypeError(f"{role} turn field {name!r} must be {expected.__name__}")
    timestamp = datetime.fromisoformat(values["timestamp"])
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    values["timestamp"] = timestamp
    return cls(**values)


_FIELD_TYPES: dict[str, type] = {
    "content": str,
    "result_text": str,
    "invocation_id": str,
    "id": str,
    "timestamp": str,
    "success": bool,
    "iteration": int,
    "duration_ms": int,
}


def _is_instance(value: Any, expected: type) -> bool:
    if expected is int and isinstance(value, bool):
        return False
    return isinstance(value, expected)
