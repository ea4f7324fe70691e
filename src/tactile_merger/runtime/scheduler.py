"""Schedulers controlling the contact publish cadence."""

from __future__ import annotations

import abc
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Mapping

LOGGER = logging.getLogger(__name__)


class SchedulerFault(RuntimeError):  # noqa: N818
    """Raised when the scheduler detects sustained timing overruns."""


class BaseScheduler(abc.ABC):
    """Abstract loop scheduler that yields on each publish tick."""

    @abc.abstractmethod
    def ticks(self) -> Iterator[float]:
        """Yield the time since the loop started for each tick."""

    def close(self) -> None:
        """Optional cleanup hook executed when leaving the scheduler context."""
        return None

    def metrics(self) -> Mapping[str, float]:  # pragma: no cover - default no-op
        """Return timing metrics collected by the scheduler."""
        return {}

    def __enter__(self) -> "BaseScheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@dataclass(slots=True)
class SimpleScheduler(BaseScheduler):
    """Sleep-based fixed-rate scheduler.

    ``clock`` and ``sleep`` default to :func:`time.monotonic` and
    :func:`time.sleep`; tests substitute a fake clock to run without waiting.
    """

    frequency_hz: float
    duration_s: float | None = None
    jitter_budget_s: float = 0.0
    max_overruns_before_fault: int = 3
    fault_on_overrun: bool = False
    overrun_warning_cooldown_s: float = 1.0
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.frequency_hz <= 0:
            raise ValueError("frequency_hz must be positive")
        if self.jitter_budget_s < 0:
            raise ValueError("jitter_budget_s must be non-negative")
        self._dt_target = 1.0 / float(self.frequency_hz)
        self._overrun_threshold = max(0, int(self.max_overruns_before_fault))
        self._overrun_streak = 0
        self._tick_count = 0
        self._last_dt_actual: float | None = None
        self._jitter_max: float | None = None
        self._jitter_sum = 0.0
        self._last_overrun_warning: float | None = None

    def ticks(self) -> Iterator[float]:
        """Yield elapsed time while sleeping to maintain the requested frequency."""
        start = self.clock()
        count = 0
        previous = start
        while True:
            target = start + count * self._dt_target
            now = self.clock()
            sleep_time = target - now
            if sleep_time > 0:
                self.sleep(sleep_time)
                now = self.clock()

            actual_dt = now - previous
            previous = now
            if count:
                self._record_tick(actual_dt)
            else:
                self._tick_count += 1

            elapsed = now - start
            yield elapsed

            count += 1
            if self.duration_s is not None and elapsed >= self.duration_s:
                break

    def metrics(self) -> Mapping[str, float]:
        """Return the latest scheduler timing metrics."""
        periods = max(self._tick_count - 1, 0)
        return {
            "dt_target_s": float(self._dt_target),
            "dt_actual_s": float(
                self._last_dt_actual if self._last_dt_actual is not None else self._dt_target
            ),
            "jitter_max_s": float(self._jitter_max or 0.0),
            "jitter_mean_s": float(self._jitter_sum / periods) if periods else 0.0,
            "overrun_streak": float(self._overrun_streak),
            "ticks": float(self._tick_count),
        }

    def _record_tick(self, actual_dt: float) -> None:
        """Update jitter statistics and enforce overrun policies."""
        self._tick_count += 1
        self._last_dt_actual = actual_dt
        jitter = actual_dt - self._dt_target
        self._jitter_sum += jitter
        if self._jitter_max is None or jitter > self._jitter_max:
            self._jitter_max = jitter

        if self._overrun_threshold and actual_dt > (self._dt_target + self.jitter_budget_s):
            self._overrun_streak += 1
            if self._overrun_streak >= self._overrun_threshold:
                if self.fault_on_overrun:
                    raise SchedulerFault(
                        f"Scheduler detected {self._overrun_streak} consecutive overruns"
                    )
                self._emit_overrun_warning(actual_dt)
                self._overrun_streak = 0
        else:
            self._overrun_streak = 0

    def _emit_overrun_warning(self, actual_dt: float) -> None:
        cooldown = max(0.0, float(self.overrun_warning_cooldown_s))
        now = self.clock()
        if self._last_overrun_warning is not None and (now - self._last_overrun_warning) < cooldown:
            return
        self._last_overrun_warning = now
        LOGGER.warning(
            "Publish loop experienced %d consecutive overruns "
            "(dt=%.6f s, target=%.6f s, jitter_budget=%.6f s); continuing execution",
            self._overrun_threshold,
            actual_dt,
            self._dt_target,
            self.jitter_budget_s,
        )
