"""Flat-file day log storage.

Layout:
    <root>/
    ├── 2026-10-17.md
    └── 2026-10-18.md      # YAML frontmatter (date, notes) + readable body

The frontmatter is the source of truth; the body is regenerated on every save.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date
from pathlib import Path

import frontmatter

from aigenda.errors import StorageError
from aigenda.models import DayLog, Note

logger = logging.getLogger(__name__)


class FsStorage:
    """One Markdown file per day."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _day_path(self, day: date) -> Path:
        return self.root / f"{day.isoformat()}.md"

    def load_day(self, day: date) -> DayLog:
        path = self._day_path(day)
        if not path.exists():
            return DayLog(date=day)
        return self._read(path)

    def save_day(self, log: DayLog) -> None:
        post = frontmatter.Post(
            self._render_body(log),
            date=log.date.isoformat(),
            notes=[note.to_dict() for note in log.notes],
        )
        path = self._day_path(log.date)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
        logger.debug("Saved %d notes to %s", len(log.notes), path)

    def iterate_days(self) -> Iterator[DayLog]:
        if not self.root.is_dir():
            return
        for path in sorted(self.root.glob("*.md")):
            yield self._read(path)

    # ── Internal ─────────────────────────────────────────────

    def _read(self, path: Path) -> DayLog:
        try:
            post = frontmatter.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}") from e
        except Exception as e:
            raise StorageError(f"Could not parse {path}: {e}") from e

        try:
            raw_date = post.metadata.get("date", path.stem)
            day = raw_date if isinstance(raw_date, date) else date.fromisoformat(str(raw_date))
            notes = [Note.from_dict(item) for item in post.metadata.get("notes") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed day log {path}: {e}") from e
        return DayLog(date=day, notes=notes)

    def _render_body(self, log: DayLog) -> str:
        lines = [f"# {log.date.isoformat()}", ""]
        for i, note in enumerate(log.notes, 1):
            lines.append(f"{i}. [{note.when.strftime('%H:%M')}] {note.text}")
        return "\n".join(lines)
