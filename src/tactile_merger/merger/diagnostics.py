"""Per-sensor bookkeeping for accepted, rejected and out-of-order updates."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque


@dataclass(slots=True)
class SensorUpdateStats:
    """Counters describing the update stream of a single sensor."""

    accepted: int = 0
    rejected: int = 0
    out_of_order: int = 0
    last_timestamp: float | None = None
    last_rejection: str | None = None
    hz_estimate: float | None = None
    hz_mean: float | None = None
    recent_periods: tuple[float, ...] = ()


@dataclass(slots=True)
class _StatsTracker:
    stats: SensorUpdateStats
    history: Deque[float]

    def record_accept(self, timestamp: float) -> bool:
        """Count an accepted update; return ``True`` when it moved backward."""
        stats = self.stats
        backward = stats.last_timestamp is not None and timestamp < stats.last_timestamp
        if backward:
            stats.out_of_order += 1
        elif stats.last_timestamp is not None:
            dt = timestamp - stats.last_timestamp
            if dt > 0:
                self.history.append(dt)
                stats.hz_estimate = 1.0 / dt
        stats.accepted += 1
        stats.last_timestamp = timestamp
        return backward

    def record_reject(self, reason: str) -> None:
        self.stats.rejected += 1
        self.stats.last_rejection = reason

    def snapshot(self) -> SensorUpdateStats:
        stats = self.stats
        periods = tuple(self.history)
        mean = sum(periods) / len(periods) if periods else None
        return SensorUpdateStats(
            accepted=stats.accepted,
            rejected=stats.rejected,
            out_of_order=stats.out_of_order,
            last_timestamp=stats.last_timestamp,
            last_rejection=stats.last_rejection,
            hz_estimate=stats.hz_estimate,
            hz_mean=(1.0 / mean) if mean else None,
            recent_periods=periods,
        )


@dataclass(slots=True)
class MergerDiagnostics:
    """Aggregated update statistics keyed by sensor name."""

    window: int = 64
    _trackers: dict[str, _StatsTracker] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.window <= 0:
            raise ValueError("diagnostics window must be positive")

    def _tracker(self, name: str) -> _StatsTracker:
        tracker = self._trackers.get(name)
        if tracker is None:
            tracker = _StatsTracker(SensorUpdateStats(), deque(maxlen=self.window))
            self._trackers[name] = tracker
        return tracker

    def record_accept(self, name: str, timestamp: float) -> bool:
        """Count an accepted update for ``name``; report out-of-order delivery."""
        return self._tracker(name).record_accept(timestamp)

    def record_reject(self, name: str, reason: str) -> None:
        """Count a rejected update for ``name``."""
        self._tracker(str(name)).record_reject(reason)

    def sensor(self, name: str) -> SensorUpdateStats:
        """Return a copy of the statistics for ``name`` (zeros if unseen)."""
        tracker = self._trackers.get(name)
        if tracker is None:
            return SensorUpdateStats()
        return tracker.snapshot()

    def as_dict(self) -> dict[str, SensorUpdateStats]:
        """Return copies of every tracked sensor's statistics."""
        return {name: tracker.snapshot() for name, tracker in self._trackers.items()}

    @property
    def total_rejected(self) -> int:
        """Rejected updates summed over all sensors."""
        return sum(tracker.stats.rejected for tracker in self._trackers.values())

    def clear(self) -> None:
        """Drop all tracked statistics."""
        self._trackers.clear()
