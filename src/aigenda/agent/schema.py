"""Capability schemas: what a tool offers and how its parameters are checked.

Schemas are static per capability. They are rendered into the prompt so the
model knows what it may call, and compiled to JSON Schema (Draft 7) so the
registry can validate parameters with ``jsonschema``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from functools import cached_property
from typing import Any

from jsonschema import Draft7Validator, FormatChecker, ValidationError
from jsonschema.exceptions import best_match

from aigenda.errors import InvalidParameter

RELATIVE_DATES = ("today", "yesterday", "tomorrow")


class Category(str, Enum):
    INTERNAL = "internal"  # CRUD on local data
    EXTERNAL = "external"  # calls out to other services
    SYSTEM = "system"

    @property
    def label(self) -> str:
        return {
            Category.INTERNAL: "Internal CRUD",
            Category.EXTERNAL: "External API",
            Category.SYSTEM: "System",
        }[self]


class ParamType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    DATE = "date"
    DATETIME = "datetime"


@dataclass(frozen=True)
class Validation:
    """Extra constraints on top of the parameter type."""

    pattern: str | None = None
    enum_values: tuple[Any, ...] | None = None
    min_value: float | None = None
    max_value: float | None = None
    max_length: int | None = None


@dataclass(frozen=True)
class ParameterSchema:
    name: str
    type: ParamType
    description: str = ""
    required: bool = False
    default: Any = None
    validation: Validation | None = None
    item_type: ParamType | None = None
    properties: tuple[ParameterSchema, ...] = ()

    def type_label(self) -> str:
        v = self.validation
        if self.type is ParamType.STRING and v and v.max_length is not None:
            return f"string(max: {v.max_length})"
        if self.type in (ParamType.NUMBER, ParamType.INTEGER) and v:
            lo, hi = v.min_value, v.max_value
            if lo is not None and hi is not None:
                return f"{self.type.value}({lo:g}-{hi:g})"
            if lo is not None:
                return f"{self.type.value}(min: {lo:g})"
            if hi is not None:
                return f"{self.type.value}(max: {hi:g})"
        if self.type is ParamType.ARRAY:
            return f"array<{(self.item_type or ParamType.STRING).value}>"
        if self.type is ParamType.DATE:
            return "date (YYYY-MM-DD)"
        if self.type is ParamType.DATETIME:
            return "datetime (ISO 8601)"
        return self.type.value

    def to_json_schema(self) -> dict[str, Any]:
        """JSON Schema (Draft 7) fragment describing this parameter."""
        schema: dict[str, Any] = dict(_JSON_TYPES.get(self.type, {"type": self.type.value}))
        if self.description:
            schema["description"] = self.description
        if self.type is ParamType.ARRAY and self.item_type is not None:
            schema["items"] = ParameterSchema("items", self.item_type).to_json_schema()
        if self.type is ParamType.OBJECT and self.properties:
            schema["properties"] = {p.name: p.to_json_schema() for p in self.properties}
            required = [p.name for p in self.properties if p.required]
            if required:
                schema["required"] = required

        v = self.validation
        if v is not None:
            if v.pattern is not None:
                # JSON Schema patterns are unanchored
                schema["pattern"] = f"^(?:{v.pattern})$"
            if v.enum_values is not None:
                schema["enum"] = list(v.enum_values)
            if v.min_value is not None:
                schema["minimum"] = v.min_value
            if v.max_value is not None:
                schema["maximum"] = v.max_value
            if v.max_length is not None:
                key = "maxItems" if self.type is ParamType.ARRAY else "maxLength"
                schema[key] = v.max_length
        return schema

    @cached_property
    def _validator(self) -> Draft7Validator:
        return Draft7Validator(self.to_json_schema(), format_checker=FORMAT_CHECKER)

    def validate(self, value: Any, path: str | None = None) -> None:
        """Raise InvalidParameter if ``value`` does not satisfy this schema."""
        _raise_first_error(self._validator, value, path or self.name)


# ── JSON Schema plumbing ─────────────────────────────────────

_JSON_TYPES: dict[ParamType, dict[str, str]] = {
    ParamType.DATE: {"type": "string", "format": "date"},
    ParamType.DATETIME: {"type": "string", "format": "date-time"},
}

FORMAT_CHECKER = FormatChecker(formats=())


@FORMAT_CHECKER.checks("date", raises=ValueError)
def _is_date(value: object) -> bool:
    if not isinstance(value, str) or value.strip().lower() in RELATIVE_DATES:
        return True
    date.fromisoformat(value)
    return True


@FORMAT_CHECKER.checks("date-time", raises=ValueError)
def _is_datetime(value: object) -> bool:
    if isinstance(value, str):
        datetime.fromisoformat(value)
    return True


def _raise_first_error(validator: Draft7Validator, instance: Any, root: str) -> None:
    error = best_match(validator.iter_errors(instance))
    if error is None:
        return
    raise InvalidParameter(_error_path(root, error.absolute_path), _error_message(error))


def _error_path(root: str, parts: Iterable[str | int]) -> str:
    path = root
    for part in parts:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or "parameters"


def _error_message(error: ValidationError) -> str:
    if error.validator == "maxLength":
        # The default message echoes the whole value back
        return f"is longer than {error.validator_value} characters"
    if error.validator == "format":
        return f"{error.instance!r} is not a valid {error.validator_value}"
    return error.message


@dataclass(frozen=True)
class ReturnSchema:
    description: str
    type: ParamType = ParamType.STRING
    possible_errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ActionSchema:
    name: str
    description: str
    parameters: tuple[ParameterSchema, ...] = ()
    returns: ReturnSchema | None = None

    def parameter(self, name: str) -> ParameterSchema | None:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for the ``parameters`` object of this action."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
        }
        required = [p.name for p in self.parameters if p.required]
        if required:
            schema["required"] = required
        return schema

    @cached_property
    def _validator(self) -> Draft7Validator:
        return Draft7Validator(self.input_schema(), format_checker=FORMAT_CHECKER)

    def validate(self, parameters: dict[str, Any]) -> None:
        """Raise InvalidParameter naming the first offending parameter."""
        _raise_first_error(self._validator, parameters, "")


@dataclass(frozen=True)
class ToolExample:
    description: str
    user_request: str
    tool_call: dict
    expected_result: str


@dataclass(frozen=True)
class CapabilitySchema:
    name: str
    description: str
    category: Category
    actions: tuple[ActionSchema, ...] = ()
    examples: tuple[ToolExample, ...] = field(default=())

    def action(self, name: str) -> ActionSchema | None:
        for a in self.actions:
            if a.name == name:
                return a
        return None

    def to_prompt(self) -> str:
        """Render as the Markdown block shown to the model."""
        lines = [
            f"### {self.name} Tool ({self.category.label})",
            f"**Description**: {self.description}",
            "",
            "**Available Actions**:",
        ]
        for action in self.actions:
            lines.append(f"- `{action.name}`: {action.description}")
            if action.parameters:
                lines.append("  Parameters:")
            for p in action.parameters:
                required = " **(required)**" if p.required else " (optional)"
                lines.append(f"  - `{p.name}` ({p.type_label()}): {p.description}{required}")
                if p.default is not None:
                    lines.append(f"    Default: `{json.dumps(p.default)}`")
                if p.validation and p.validation.pattern:
                    lines.append(f"    Pattern: `{p.validation.pattern}`")
                if p.validation and p.validation.enum_values:
                    allowed = ", ".join(json.dumps(e) for e in p.validation.enum_values)
                    lines.append(f"    Allowed values: {allowed}")
            if action.returns:
                lines.append(f"  Returns: {action.returns.type.value} - {action.returns.description}")
                if action.returns.possible_errors:
                    lines.append(f"  Possible errors: {', '.join(action.returns.possible_errors)}")
            lines.append("")

        if self.examples:
            lines.append("**Examples**:")
            for ex in self.examples:
                lines.append(f"- {ex.description}")
                lines.append(f'  User: "{ex.user_request}"')
                lines.append(f"  Tool call: `{json.dumps(ex.tool_call, ensure_ascii=False)}`")
                lines.append(f'  Result: "{ex.expected_result}"')
                lines.append("")
        return "\n".join(lines)
