"""Tests for the notes capability."""

from datetime import date
from pathlib import Path

import pytest

from aigenda.agent.registry import Capability, CapabilityRegistry
from aigenda.agent.schema import Category
from aigenda.agent.turns import ToolInvocation
from aigenda.errors import InvalidParameter, UnknownAction
from aigenda.models import DayLog, Note
from aigenda.storage.fs import FsStorage
from aigenda.tools.notes import NotesCapability

TODAY = date(2026, 10, 18)


@pytest.fixture
def storage(tmp_path: Path) -> FsStorage:
    return FsStorage(tmp_path / "daily")


@pytest.fixture
def notes(storage: FsStorage) -> NotesCapability:
    return NotesCapability(storage, today=lambda: TODAY)


def _seed(storage: FsStorage, day: date, *texts: str) -> None:
    storage.save_day(DayLog(day, [Note(text=t) for t in texts]))


class TestSchema:
    def test_identity(self, notes: NotesCapability):
        assert isinstance(notes, Capability)
        assert notes.name == "notes"
        assert notes.category is Category.INTERNAL
        assert [a.name for a in notes.schema().actions] == ["create", "read", "update", "delete"]

    def test_prompt_mentions_actions(self, notes: NotesCapability):
        text = notes.schema().to_prompt()
        assert "### notes Tool (Internal CRUD)" in text
        for action in ["create", "read", "update", "delete"]:
            assert f"- `{action}`" in text


class TestCreate:
    def test_today_by_default(self, notes: NotesCapability, storage: FsStorage):
        assert notes.execute("create", {"text": "ship v0.1"}) == "Note added successfully for 2026-10-18"
        assert [n.text for n in storage.load_day(TODAY).notes] == ["ship v0.1"]

    @pytest.mark.parametrize(
        "when, expected",
        [
            ("yesterday", date(2026, 10, 17)),
            ("tomorrow", date(2026, 10, 19)),
            ("Today", TODAY),
            ("2026-01-05", date(2026, 1, 5)),
        ],
    )
    def test_dates(self, notes: NotesCapability, storage: FsStorage, when, expected):
        notes.create("x", when)
        assert len(storage.load_day(expected).notes) == 1

    def test_invalid_date(self, notes: NotesCapability):
        with pytest.raises(InvalidParameter, match="date"):
            notes.create("x", "next week")

    def test_appends(self, notes: NotesCapability, storage: FsStorage):
        notes.create("one")
        notes.create("two")
        assert [n.text for n in storage.load_day(TODAY).notes] == ["one", "two"]


class TestRead:
    def test_one_day(self, notes: NotesCapability, storage: FsStorage):
        _seed(storage, TODAY, "one", "two")
        text = notes.read("today")
        lines = text.splitlines()
        assert lines[0] == "Notes for 2026-10-18 (2 total):"
        assert lines[1].startswith("1. [") and lines[1].endswith("] one")
        assert lines[2].endswith("] two")

    def test_limit_keeps_total(self, notes: NotesCapability, storage: FsStorage):
        _seed(storage, TODAY, "a", "b", "c")
        text = notes.read("2026-10-18", limit=1)
        assert "(3 total)" in text
        assert len(text.splitlines()) == 2

    def test_empty_day(self, notes: NotesCapability):
        assert notes.read("yesterday") == "No notes found for 2026-10-17"

    def test_recent_across_days(self, notes: NotesCapability, storage: FsStorage):
        _seed(storage, date(2026, 10, 16), "old")
        _seed(storage, date(2026, 10, 17), "mid1", "mid2")
        _seed(storage, TODAY, "new")
        lines = notes.read(limit=3).splitlines()
        assert lines[0] == "Recent notes:"
        assert [line.rsplit("] ", 1)[1] for line in lines[1:]] == ["new", "mid2", "mid1"]

    def test_recent_none(self, notes: NotesCapability):
        assert notes.read() == "No notes found"


class TestUpdateDelete:
    def test_update(self, notes: NotesCapability, storage: FsStorage):
        _seed(storage, TODAY, "draft", "keep")
        assert notes.update("today", 1, "final") == "Note 1 updated successfully for 2026-10-18"
        assert [n.text for n in storage.load_day(TODAY).notes] == ["final", "keep"]

    def test_delete(self, notes: NotesCapability, storage: FsStorage):
        _seed(storage, TODAY, "gone", "stays")
        assert notes.delete("today", 1) == "Note 1 deleted successfully from 2026-10-18: gone"
        assert [n.text for n in storage.load_day(TODAY).notes] == ["stays"]

    @pytest.mark.parametrize("index", [0, 2, 10])
    def test_index_out_of_range(self, notes: NotesCapability, storage: FsStorage, index: int):
        _seed(storage, TODAY, "only")
        with pytest.raises(InvalidParameter, match="not found"):
            notes.delete("today", index)
        assert len(storage.load_day(TODAY).notes) == 1

    def test_unknown_action(self, notes: NotesCapability):
        with pytest.raises(UnknownAction):
            notes.execute("archive", {})


class TestThroughRegistry:
    @pytest.fixture
    def registry(self, notes: NotesCapability) -> CapabilityRegistry:
        r = CapabilityRegistry()
        r.register(notes)
        return r

    def test_read_defaults_applied(self, registry: CapabilityRegistry, storage: FsStorage):
        _seed(storage, TODAY, *[f"n{i}" for i in range(12)])
        text = registry.execute(ToolInvocation("notes", "read", {}))
        assert len(text.splitlines()) == 11  # header + default limit of 10

    def test_limit_range_enforced(self, registry: CapabilityRegistry):
        with pytest.raises(InvalidParameter, match="limit"):
            registry.execute(ToolInvocation("notes", "read", {"limit": 500}))

    def test_text_length_enforced(self, registry: CapabilityRegistry):
        with pytest.raises(InvalidParameter, match="text"):
            registry.execute(ToolInvocation("notes", "create", {"text": "x" * 5001}))
