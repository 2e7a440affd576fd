"""Daily note records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass
class Note:
    """A single timestamped note."""

    text: str
    when: datetime = field(default_factory=lambda: datetime.now().astimezone())
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"when": self.when.isoformat(), "text": self.text, "tags": list(self.tags)}

    @classmethod
    def from_dict(cls, data: dict) -> Note:
        when = data["when"]
        if not isinstance(when, datetime):
            when = datetime.fromisoformat(str(when))
        return cls(text=str(data["text"]), when=when, tags=list(data.get("tags") or []))


@dataclass
class DayLog:
    """All notes recorded for one calendar day, in insertion order."""

    date: date
    notes: list[Note] = field(default_factory=list)

    def add(self, note: Note) -> None:
        self.notes.append(note)
