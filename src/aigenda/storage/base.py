"""Storage protocol for day logs."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from typing import Protocol, runtime_checkable

from aigenda.models import DayLog


@runtime_checkable
class Storage(Protocol):
    """Key(date)-to-record store. All methods raise StorageError on failure."""

    def load_day(self, day: date) -> DayLog:
        """Return the log for ``day``, empty if nothing was recorded."""
        ...

    def save_day(self, log: DayLog) -> None: ...

    def iterate_days(self) -> Iterator[DayLog]:
        """Yield every stored day, oldest first."""
        ...
