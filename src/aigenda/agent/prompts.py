"""Prompt templates for the agent loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aigenda.agent.registry import CapabilityRegistry
    from aigenda.agent.turns import AssistantMessage, ToolOutcome

SYSTEM_PROMPT = """\
You are aigenda, a helpful assistant for a personal daily-notes journal.
You can act on the user's notes by emitting JSON tool calls in your reply.
Be conversational and explain what you are doing and why.
"""

TOOL_FORMAT = """\
```json
{{
    "tool": "tool_name",
    "action": "action_name",
    "parameters": {{
        "param1": "value1"
    }}
}}
```"""

INITIAL_TEMPLATE = """\
Available Tools:
{tools}

{recent_tools}Current User Request: {request}

## Chain of Thought Instructions:

Work through this request step by step, using as many tool calls as the task needs.

**Execution Pattern:**
1. **Analyze the request** and explain your understanding
2. **Plan your approach** - what steps will you take?
3. **Execute tools** as needed with JSON format
4. **If more actions are needed**, say so clearly in your response
5. **Continue until the task is complete**

**Tool Usage Format:**
{tool_format}

Several calls may appear in one reply, or be given as a JSON array.

**Continuation Signals:**
If you need to continue with more actions after seeing tool results, include phrases like:
- "Let me also..."
- "I need to..."
- "Next, I'll..."
- "Additionally..."

Start by analyzing the request and explaining your approach.
"""

CONTINUATION_TEMPLATE = """\
Available Tools:
{tools}

## Continuation Context:

Original User Request: {request}

Your previous response:
{previous}

Tool results since then:
{outcomes}

## Continuation Instructions:

You are continuing to work on the user's original request.

1. **Review** what has been accomplished so far
2. **Determine** if the original request is fully satisfied
3. **If more actions are needed**:
   - Explain what you need to do next
   - Execute the appropriate tools with JSON format
   - Use continuation signals like "Let me also...", "Next, I'll..."
4. **If the task is complete**:
   - Provide a natural conclusion
   - Summarize what was accomplished
   - Don't include any tool JSON

**Tool Usage Format (if needed):**
{tool_format}
"""


def build_initial_prompt(
    request: str,
    registry: CapabilityRegistry,
    recent_tools: list[str] | None = None,
) -> str:
    hint = f"Recently used tools: {', '.join(recent_tools)}\n\n" if recent_tools else ""
    return INITIAL_TEMPLATE.format(
        tools=registry.render_descriptions(),
        recent_tools=hint,
        request=request,
        tool_format=TOOL_FORMAT.format(),
    )


def build_continuation_prompt(
    request: str,
    previous: AssistantMessage,
    outcomes: list[ToolOutcome],
    registry: CapabilityRegistry,
) -> str:
    return CONTINUATION_TEMPLATE.format(
        tools=registry.render_descriptions(),
        request=request,
        previous=previous.content,
        outcomes=format_outcomes(outcomes),
        tool_format=TOOL_FORMAT.format(),
    )


def format_outcomes(outcomes: list[ToolOutcome]) -> str:
    if not outcomes:
        return "(no tools were executed)"
    lines = []
    for o in outcomes:
        status = "success" if o.success else "failed"
        lines.append(f"- {o.tool_name}.{o.action_name} [{status}]: {o.result_text}")
    return "\n".join(lines)
