"""Daily notes capability — CRUD over the day log storage."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

from aigenda.agent.schema import (
    ActionSchema,
    CapabilitySchema,
    Category,
    ParameterSchema,
    ParamType,
    ReturnSchema,
    ToolExample,
    Validation,
)
from aigenda.errors import InvalidParameter, UnknownAction
from aigenda.models import Note
from aigenda.storage.base import Storage

MAX_NOTE_LENGTH = 5000

_TEXT = ParameterSchema(
    "text",
    ParamType.STRING,
    "The content of the note",
    required=True,
    validation=Validation(max_length=MAX_NOTE_LENGTH),
)
_INDEX = ParameterSchema(
    "index",
    ParamType.INTEGER,
    "Position of the note (1-based index)",
    required=True,
    validation=Validation(min_value=1),
)
_DATE_REQUIRED = ParameterSchema(
    "date", ParamType.DATE, "Date of the note in YYYY-MM-DD format", required=True
)

SCHEMA = CapabilitySchema(
    name="notes",
    description=(
        "Manage daily notes with full CRUD operations. Notes are organized by date "
        "and stored locally. Dates may also be given as today, yesterday or tomorrow."
    ),
    category=Category.INTERNAL,
    actions=(
        ActionSchema(
            "create",
            "Add a new note to today's log or a specific date",
            (
                _TEXT,
                ParameterSchema(
                    "date", ParamType.DATE, "Date for the note in YYYY-MM-DD format", default="today"
                ),
            ),
            ReturnSchema(
                "Confirmation message with the date the note was added",
                possible_errors=("Invalid date format",),
            ),
        ),
        ActionSchema(
            "read",
            "Read notes from a specific date, or recent notes across days when no date is given",
            (
                ParameterSchema("date", ParamType.DATE, "Date in YYYY-MM-DD format to read notes from"),
                ParameterSchema(
                    "limit",
                    ParamType.INTEGER,
                    "Maximum number of notes to return",
                    default=10,
                    validation=Validation(min_value=1, max_value=100),
                ),
            ),
            ReturnSchema(
                "List of notes with timestamps and content, and the day's total",
                possible_errors=("Invalid date format",),
            ),
        ),
        ActionSchema(
            "update",
            "Replace the text of an existing note by its position",
            (_DATE_REQUIRED, _INDEX, ParameterSchema(
                "text",
                ParamType.STRING,
                "New content for the note",
                required=True,
                validation=Validation(max_length=MAX_NOTE_LENGTH),
            )),
            ReturnSchema(
                "Confirmation message with the updated note details",
                possible_errors=("Note not found", "Invalid date format", "Invalid index"),
            ),
        ),
        ActionSchema(
            "delete",
            "Delete a specific note by its position",
            (_DATE_REQUIRED, _INDEX),
            ReturnSchema(
                "Confirmation message with the deleted note details",
                possible_errors=("Note not found", "Invalid date format", "Invalid index"),
            ),
        ),
    ),
    examples=(
        ToolExample(
            "Create a simple note for today",
            "add a note about finishing the quarterly report",
            {"tool": "notes", "action": "create", "parameters": {"text": "Finished the quarterly report"}},
            "Note added successfully for 2026-10-18",
        ),
        ToolExample(
            "Read today's notes",
            "show me today's notes",
            {"tool": "notes", "action": "read", "parameters": {"date": "today"}},
            "Notes for 2026-10-18 (1 total):\n1. [20:45] Finished the quarterly report",
        ),
        ToolExample(
            "Update a specific note",
            "change my first note from today",
            {
                "tool": "notes",
                "action": "update",
                "parameters": {"date": "today", "index": 1, "text": "Sent the quarterly report"},
            },
            "Note 1 updated successfully for 2026-10-18",
        ),
    ),
)


class NotesCapability:
    """Create, read, update and delete daily notes."""

    def __init__(self, storage: Storage, today: Callable[[], date] = date.today) -> None:
        self._storage = storage
        self._today = today

    @property
    def name(self) -> str:
        return SCHEMA.name

    @property
    def description(self) -> str:
        return "Manage daily notes with full CRUD operations"

    @property
    def category(self) -> Category:
        return SCHEMA.category

    def schema(self) -> CapabilitySchema:
        return SCHEMA

    def execute(self, action: str, parameters: dict[str, Any]) -> str:
        if action == "create":
            return self.create(parameters["text"], parameters.get("date"))
        if action == "read":
            return self.read(parameters.get("date"), parameters.get("limit", 10))
        if action == "update":
            return self.update(parameters["date"], parameters["index"], parameters["text"])
        if action == "delete":
            return self.delete(parameters["date"], parameters["index"])
        raise UnknownAction(self.name, action)

    # ── Actions ──────────────────────────────────────────────

    def create(self, text: str, when: str | None = None) -> str:
        day = self._resolve_date(when)
        log = self._storage.load_day(day)
        log.add(Note(text=text))
        self._storage.save_day(log)
        return f"Note added successfully for {day.isoformat()}"

    def read(self, when: str | None = None, limit: int = 10) -> str:
        if when is not None:
            day = self._resolve_date(when)
            notes = self._storage.load_day(day).notes
            if not notes:
                return f"No notes found for {day.isoformat()}"
            lines = [f"Notes for {day.isoformat()} ({len(notes)} total):"]
            for i, note in enumerate(notes[:limit], 1):
                lines.append(f"{i}. [{note.when.strftime('%H:%M')}] {note.text}")
            return "\n".join(lines)

        recent: list[Note] = []
        for log in reversed(list(self._storage.iterate_days())):
            for note in reversed(log.notes):
                recent.append(note)
                if len(recent) >= limit:
                    break
            if len(recent) >= limit:
                break
        if not recent:
            return "No notes found"
        lines = ["Recent notes:"]
        lines.extend(f"[{n.when.strftime('%Y-%m-%d %H:%M')}] {n.text}" for n in recent)
        return "\n".join(lines)

    def update(self, when: str, index: int, text: str) -> str:
        day = self._resolve_date(when)
        log = self._storage.load_day(day)
        note = self._note_at(log.notes, index, day)
        log.notes[index - 1] = Note(text=text, tags=note.tags)
        self._storage.save_day(log)
        return f"Note {index} updated successfully for {day.isoformat()}"

    def delete(self, when: str, index: int) -> str:
        day = self._resolve_date(when)
        log = self._storage.load_day(day)
        note = self._note_at(log.notes, index, day)
        del log.notes[index - 1]
        self._storage.save_day(log)
        return f"Note {index} deleted successfully from {day.isoformat()}: {note.text}"

    # ── Helpers ──────────────────────────────────────────────

    def _resolve_date(self, value: str | None) -> date:
        if value is None:
            return self._today()
        keyword = value.strip().lower()
        offsets = {"today": 0, "yesterday": -1, "tomorrow": 1}
        if keyword in offsets:
            return self._today() + timedelta(days=offsets[keyword])
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise InvalidParameter("date", "expected a date in YYYY-MM-DD format") from None

    @staticmethod
    def _note_at(notes: list[Note], index: int, day: date) -> Note:
        if not 1 <= index <= len(notes):
            raise InvalidParameter("index", f"note {index} not found for {day.isoformat()}")
        return notes[index - 1]
