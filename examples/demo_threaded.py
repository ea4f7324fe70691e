"""Drive the merger from a synthetic ingestion thread and a fixed-rate publisher."""

from __future__ import annotations

import math
import threading
import time

from tactile_merger.config import MergerConfig, SensorOverride
from tactile_merger.ingestion import SensorReading, TactileState, TactileStateAdapter
from tactile_merger.merger import TactileMerger
from tactile_merger.runtime import ContactPublisher, InMemoryContactSink
from tactile_merger.utils.logging import configure_logging


def _produce(adapter: TactileStateAdapter, stop: threading.Event, rate_hz: float) -> None:
    start = time.monotonic()
    while not stop.is_set():
        now = time.monotonic()
        phase = now - start
        palm = tuple(0.6 + 0.4 * math.sin(phase + i) for i in range(16))
        fingertip = (0.0, max(0.0, math.sin(4.0 * phase)))
        sensors = [SensorReading("palm", palm)]
        # the fingertip goes silent for the second half of every 2 s cycle
        if phase % 2.0 < 1.0:
            sensors.append(SensorReading("fingertip", fingertip))
        adapter.handle(TactileState(timestamp=now, sensors=tuple(sensors)))
        time.sleep(1.0 / rate_hz)


def main(duration_s: float = 3.0, publish_hz: float = 20.0) -> None:
    """Run ingestion and publishing concurrently and print a short summary."""
    configure_logging()
    merger = TactileMerger(
        MergerConfig(
            threshold=0.5,
            timeout_s=0.25,
            sensors={"palm": SensorOverride(threshold=0.9)},
        )
    )
    stop = threading.Event()
    producer = threading.Thread(
        target=_produce,
        args=(TactileStateAdapter(merger), stop, 60.0),
        name="TactileIngestion",
        daemon=True,
    )
    sink = InMemoryContactSink(capacity=1000)
    publisher = ContactPublisher(merger, sink, frequency_hz=publish_hz)

    producer.start()
    try:
        for snapshot in publisher.run(duration_s=duration_s):
            summary = ", ".join(
                f"{c.name}:{'stale' if c.stale else len(c.active_taxels)}" for c in snapshot
            )
            print(f"t={snapshot.timestamp:.3f} {summary}")
    finally:
        stop.set()
        producer.join(timeout=1.0)
    for name, stats in merger.diagnostics.as_dict().items():
        print(name, stats.accepted, "updates,", f"{stats.hz_mean or 0.0:.1f} Hz")


if __name__ == "__main__":
    main()
