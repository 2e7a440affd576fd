"""Decide whether the model said it has more work to do.

This is plain phrase matching on the assistant's prose. It is language-bound and
can misfire (a "next, I'll" inside a quoted note counts too); the iteration cap
in the orchestrator bounds the damage.
"""

from __future__ import annotations

CONTINUATION_PHRASES = (
    "let me also",
    "i'll also",
    "next, i'll",
    "additionally",
    "i need to",
    "i should also",
    "now i'll",
    "then i'll",
)


def should_continue(text: str) -> bool:
    lowered = text.lower().replace("’", "'")
    return any(phrase in lowered for phrase in CONTINUATION_PHRASES)
