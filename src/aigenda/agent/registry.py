"""Capability protocol and registry."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from aigenda.agent.schema import CapabilitySchema, Category
from aigenda.agent.turns import ToolInvocation
from aigenda.errors import (
    CapabilityFailed,
    InvalidParameter,
    MissingParameter,
    ToolError,
    UnknownAction,
    UnknownTool,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class Capability(Protocol):
    """Protocol that every tool exposed to the agent must implement."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def category(self) -> Category: ...

    def schema(self) -> CapabilitySchema: ...

    def execute(self, action: str, parameters: dict[str, Any]) -> str:
        """Run ``action`` with already validated parameters and return the result text."""
        ...


class CapabilityRegistry:
    """Name-keyed capabilities, kept in registration order."""

    def __init__(self) -> None:
        self._capabilities: dict[str, Capability] = {}
        self._schemas: dict[str, CapabilitySchema] = {}

    def register(self, capability: Capability) -> None:
        name = capability.name
        if name in self._capabilities:
            raise ValueError(f"Capability '{name}' is already registered")
        self._capabilities[name] = capability
        self._schemas[name] = capability.schema()
        logger.info("Registered capability: %s", name)

    def lookup(self, name: Any) -> Capability:
        if not isinstance(name, str) or name not in self._capabilities:
            raise UnknownTool(name, self.names())
        return self._capabilities[name]

    def names(self) -> list[str]:
        return list(self._capabilities)

    def describe_all(self) -> list[CapabilitySchema]:
        return list(self._schemas.values())

    def render_descriptions(self) -> str:
        return "\n\n".join(schema.to_prompt() for schema in self._schemas.values())

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities

    def __len__(self) -> int:
        return len(self._capabilities)

    # ── Dispatch ─────────────────────────────────────────────

    def execute(self, invocation: ToolInvocation) -> str:
        """Validate ``invocation`` against its schema and run it.

        Raises UnknownTool, UnknownAction, MissingParameter, InvalidParameter,
        or CapabilityFailed when the capability itself errors.
        """
        capability = self.lookup(invocation.tool_name)
        name = capability.name
        params = self._validate(name, invocation.action_name, invocation.parameters)

        logger.info("Executing %s.%s", name, invocation.action_name)
        try:
            return capability.execute(invocation.action_name, params)
        except ToolError:
            raise
        except Exception as e:
            logger.error("Capability %s.%s failed: %s", name, invocation.action_name, e)
            raise CapabilityFailed(f"{name}.{invocation.action_name} failed: {e}") from e

    def _validate(self, tool: str, action_name: Any, parameters: Any) -> dict[str, Any]:
        schema = self._schemas[tool]
        action = schema.action(action_name) if isinstance(action_name, str) else None
        if action is None:
            raise UnknownAction(tool, action_name)
        if not isinstance(parameters, dict):
            raise InvalidParameter("parameters", f"expected object, got {type(parameters).__name__}")

        params = dict(parameters)
        for p in action.parameters:
            if params.get(p.name) is not None:
                continue
            if p.required:
                raise MissingParameter(tool, action.name, p.name)
            if p.default is not None:
                params[p.name] = p.default
            else:
                params.pop(p.name, None)
        action.validate(params)
        return params
