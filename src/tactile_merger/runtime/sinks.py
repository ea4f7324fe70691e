"""Contact sinks consumed by the publish loop.

Provides an abstract interface and three implementations:
- NoOpContactSink: drops snapshots.
- InMemoryContactSink: keeps recent snapshots for tests and monitoring.
- CSVContactSink: appends one row per sensor per tick to a CSV file.
"""

from __future__ import annotations

import csv
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, Mapping, TextIO

from ..merger.snapshot import ContactSnapshot

CSV_COLUMNS: tuple[str, ...] = (
    "tick_timestamp",
    "sensor",
    "sample_timestamp",
    "age_s",
    "stale",
    "in_contact",
    "active_taxels",
    "peak_value",
    "threshold",
)


class ContactSink:
    """Abstract sink API consumed by :class:`ContactPublisher`."""

    def publish(
        self,
        snapshot: ContactSnapshot,
        *,
        scheduler: Mapping[str, float] | None = None,
    ) -> None:
        """Hand over a single tick's contact snapshot."""

    def flush(self) -> None:  # pragma: no cover - trivial default
        """Persist any buffered output (optional)."""
        return None

    def close(self) -> None:  # pragma: no cover - trivial default
        """Release resources held by the sink."""
        self.flush()


class NoOpContactSink(ContactSink):
    """A sink that discards all snapshots."""

    pass


@dataclass(slots=True)
class InMemoryContactSink(ContactSink):
    """Keep the most recent snapshots in a bounded buffer."""

    capacity: int = 10_000
    snapshots: Deque[ContactSnapshot] = field(init=False, repr=False)
    scheduler_rows: Deque[dict[str, float]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("capacity must be positive")
        self.snapshots = deque(maxlen=self.capacity)
        self.scheduler_rows = deque(maxlen=self.capacity)

    def publish(
        self,
        snapshot: ContactSnapshot,
        *,
        scheduler: Mapping[str, float] | None = None,
    ) -> None:
        """Append the snapshot (and scheduler metrics when given)."""
        self.snapshots.append(snapshot)
        self.scheduler_rows.append(dict(scheduler or {}))

    @property
    def latest(self) -> ContactSnapshot | None:
        """Most recently published snapshot."""
        return self.snapshots[-1] if self.snapshots else None


class CSVContactSink(ContactSink):
    """Append per-sensor contact rows to a CSV file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._file: TextIO | None = None
        self._writer: csv.DictWriter | None = None

    @property
    def path(self) -> Path:
        """Destination CSV path."""
        return self._path

    def _ensure_writer(self) -> csv.DictWriter:
        if self._writer is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self._path.open("w", newline="", encoding="utf-8")
            self._writer = csv.DictWriter(self._file, fieldnames=list(CSV_COLUMNS))
            self._writer.writeheader()
        return self._writer

    def publish(
        self,
        snapshot: ContactSnapshot,
        *,
        scheduler: Mapping[str, float] | None = None,
    ) -> None:
        """Write one row for every sensor in the snapshot."""
        writer = self._ensure_writer()
        for contact in snapshot:
            writer.writerow(
                {
                    "tick_timestamp": snapshot.timestamp,
                    "sensor": contact.name,
                    "sample_timestamp": contact.timestamp,
                    "age_s": contact.age_s,
                    "stale": int(contact.stale),
                    "in_contact": int(contact.in_contact),
                    "active_taxels": " ".join(str(i) for i in contact.active_taxels),
                    "peak_value": "" if contact.peak_value is None else contact.peak_value,
                    "threshold": contact.threshold,
                }
            )

    def flush(self) -> None:
        """Flush buffered rows to disk."""
        if self._file is not None:
            self._file.flush()

    def close(self) -> None:
        """Flush and close the CSV handle."""
        if self._file is not None:
            self._file.flush()
            self._file.close()
        self._file = None
        self._writer = None
