"""Fixed-rate driver that polls the merger and publishes contact snapshots."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterator, Mapping

from ..merger.core import TactileMerger
from ..merger.snapshot import ContactSnapshot
from .scheduler import BaseScheduler, SimpleScheduler
from .sinks import ContactSink, NoOpContactSink


class ContactPublisher:
    """Call ``compute_contacts`` once per tick and hand the result to a sink.

    The publisher owns pacing; the merger stays passive. ``feed`` (optional) is
    invoked with the tick time before each snapshot so a replay or other
    same-thread ingestion source can push pending messages.
    """

    LOGGER = logging.getLogger(__name__)

    def __init__(
        self,
        merger: TactileMerger,
        sink: ContactSink | None = None,
        *,
        frequency_hz: float = 100.0,
        clock: Callable[[], float] = time.monotonic,
        scheduler_factory: Callable[[float | None], BaseScheduler] | None = None,
    ) -> None:
        if frequency_hz <= 0:
            raise ValueError("frequency_hz must be positive")
        self._merger = merger
        self._sink: ContactSink = sink if sink is not None else NoOpContactSink()
        self._frequency_hz = float(frequency_hz)
        self._clock = clock
        self._scheduler_factory = scheduler_factory or (
            lambda duration: SimpleScheduler(self._frequency_hz, duration, clock=clock)
        )
        self._ticks = 0
        self._sink_failures = 0

    @property
    def ticks(self) -> int:
        """Number of snapshots published so far."""
        return self._ticks

    @property
    def sink_failures(self) -> int:
        """Number of ticks whose sink raised an exception."""
        return self._sink_failures

    def tick(
        self,
        now: float | None = None,
        *,
        scheduler_metrics: Mapping[str, float] | None = None,
    ) -> ContactSnapshot:
        """Compute one snapshot at ``now`` (default: the clock) and publish it."""
        stamp = self._clock() if now is None else float(now)
        snapshot = self._merger.compute_contacts(stamp)
        try:
            self._sink.publish(snapshot, scheduler=scheduler_metrics)
        except Exception:
            self._sink_failures += 1
            self.LOGGER.exception("Contact sink failed at t=%.6f; continuing", stamp)
        self._ticks += 1
        return snapshot

    def run(
        self,
        duration_s: float | None = None,
        *,
        feed: Callable[[float], object] | None = None,
        time_origin: float | None = None,
    ) -> Iterator[ContactSnapshot]:
        """Drive the publish loop, yielding each snapshot.

        Args:
            duration_s: Optional loop duration in seconds.
            feed: Callback receiving the tick time before each snapshot.
            time_origin: Time reported for the first tick; defaults to the
                clock reading when the loop starts.
        """
        origin = self._clock() if time_origin is None else float(time_origin)
        scheduler = self._scheduler_factory(duration_s)
        self.LOGGER.info("Publishing contacts at %.1f Hz", self._frequency_hz)
        with scheduler:
            try:
                for elapsed in scheduler.ticks():
                    now = origin + elapsed
                    if feed is not None:
                        feed(now)
                    yield self.tick(now, scheduler_metrics=scheduler.metrics())
            finally:
                self._sink.flush()
                self.LOGGER.info("Contact publisher stopped after %d ticks", self._ticks)
