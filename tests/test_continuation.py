"""Tests for the continuation phrase check and outcome formatting."""

import pytest

from aigenda.agent.continuation import should_continue
from aigenda.agent.prompts import format_outcomes
from aigenda.agent.turns import ToolOutcome


class TestShouldContinue:
    @pytest.mark.parametrize(
        "text",
        [
            "Done with that. Let me also check yesterday.",
            "Next, I'll read today's notes.",
            "NOW I'LL delete it.",
            "I’ll also add a tag.",
            "Additionally, the list is empty.",
        ],
    )
    def test_phrases(self, text: str):
        assert should_continue(text)

    @pytest.mark.parametrize(
        "text",
        ["All done!", "I added the note.", "", "Next I will stop."],
    )
    def test_no_phrase(self, text: str):
        assert not should_continue(text)


class TestFormatOutcomes:
    def test_empty(self):
        assert format_outcomes([]) == "(no tools were executed)"

    def test_lines(self):
        outcomes = [
            ToolOutcome("a", "notes", "create", "Note added", True),
            ToolOutcome("b", "notes", "delete", "cancelled", False),
        ]
        assert format_outcomes(outcomes) == (
            "- notes.create [success]: Note added\n- notes.delete [failed]: cancelled"
        )
