"""Extract JSON tool invocations embedded in free-form model output.

The model answers in prose and drops ``{"tool": ..., "action": ...}`` objects
wherever it likes, sometimes inside fenced code blocks, sometimes several in a
row or wrapped in a JSON array. Anything that does not decode to an object
carrying both keys is not an invocation and is skipped without error.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

logger = logging.getLogger(__name__)

TOOL_KEY = "tool"
ACTION_KEY = "action"


def extract_json_spans(text: str) -> list[str]:
    """Return every top-level balanced ``{...}`` span in order of appearance.

    Quote and escape state is only tracked inside a span, so braces inside
    JSON strings are ignored and stray quotes in surrounding prose are harmless.
    An opening brace that is never closed is treated as prose and scanning
    resumes right after it.
    """
    spans: list[str] = []
    pos = 0
    while True:
        start = text.find("{", pos)
        if start == -1:
            return spans
        end = _match_brace(text, start)
        if end is None:
            pos = start + 1
            continue
        spans.append(text[start : end + 1])
        pos = end + 1


def _match_brace(text: str, start: int) -> int | None:
    """Index of the brace closing the one at ``start``, or None."""
    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        ch = text[i]
        if escape_next:
            escape_next = False
        elif in_string:
            if ch == "\\":
                escape_next = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def is_invocation(obj: object) -> bool:
    return isinstance(obj, dict) and TOOL_KEY in obj and ACTION_KEY in obj


def extract_invocations(text: str) -> list[dict]:
    """Return the raw invocation objects found in ``text``, in order.

    Never raises. A span that fails to decode is rescanned from the inside (a
    broken wrapper may still hold well-formed calls); a stack of span iterators
    keeps that rescan in document order without recursing.
    """
    invocations: list[dict] = []
    pending: list[Iterator[str]] = [iter(extract_json_spans(text))]
    while pending:
        span = next(pending[-1], None)
        if span is None:
            pending.pop()
            continue
        try:
            obj = json.loads(span)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed JSON candidate: %.80s", span)
            pending.append(iter(extract_json_spans(span[1:-1])))
            continue
        except RecursionError:
            logger.debug("Skipping JSON candidate nested too deeply: %.80s", span)
            continue
        if is_invocation(obj):
            invocations.append(obj)
        else:
            logger.debug("Skipping JSON object without tool/action: %.80s", span)
    return invocations
