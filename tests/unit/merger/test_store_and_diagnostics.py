"""Tests for the latest-value store, update diagnostics, and lock serialisation."""

from __future__ import annotations

import threading

import numpy as np
import pytest

from tactile_merger.config import MergerConfig
from tactile_merger.merger import (
    MergerDiagnostics,
    SampleRejectedError,
    SensorReadingStore,
    TactileMerger,
)


def test_store_creates_entries_lazily_and_fixes_length() -> None:
    store = SensorReadingStore()
    assert len(store) == 0
    sample = store.put(1.0, "palm", (0.1, 0.2, 0.3))
    assert "palm" in store
    assert sample.taxels == 3
    assert sample.values.dtype == np.float64
    with pytest.raises(SampleRejectedError):
        store.put(2.0, "palm", (0.1, 0.2))
    kept = store.get("palm")
    assert kept is sample
    store.clear()
    assert store.names() == ()


def test_store_rejects_non_numeric_timestamp() -> None:
    store = SensorReadingStore()
    with pytest.raises(SampleRejectedError):
        store.put("soon", "palm", (0.1,))  # type: ignore[arg-type]
    assert store.get("palm") is None


def test_diagnostics_track_rates_and_rejections() -> None:
    """Accepted updates feed the rate estimate; rejections keep the last reason."""
    diagnostics = MergerDiagnostics(window=4)
    for stamp in (0.0, 0.1, 0.2, 0.3):
        assert diagnostics.record_accept("palm", stamp) is False
    diagnostics.record_reject("palm", "values must not be empty")
    stats = diagnostics.sensor("palm")
    assert stats.accepted == 4
    assert stats.rejected == 1
    assert stats.last_rejection == "values must not be empty"
    assert stats.hz_mean == pytest.approx(10.0)
    assert len(stats.recent_periods) == 3
    assert diagnostics.sensor("unknown").accepted == 0
    assert diagnostics.total_rejected == 1


def test_diagnostics_window_must_be_positive() -> None:
    with pytest.raises(ValueError):
        MergerDiagnostics(window=0)


def test_concurrent_updates_and_snapshots_stay_consistent() -> None:
    """Snapshots taken during concurrent ingestion only see fully applied readings."""
    merger = TactileMerger(MergerConfig(threshold=0.5, timeout_s=1e6))
    names = [f"sensor_{idx}" for idx in range(8)]
    stop = threading.Event()
    errors: list[str] = []

    def ingest(name: str) -> None:
        stamp = 0.0
        while True:
            level = 0.9 if int(stamp) % 2 == 0 else 0.1
            merger.update(stamp, name, [level] * 16)
            stamp += 1.0
            if stop.is_set():
                break

    workers = [threading.Thread(target=ingest, args=(name,), daemon=True) for name in names]
    for worker in workers:
        worker.start()
    try:
        for _ in range(200):
            snapshot = merger.compute_contacts(0.0)
            for contact in snapshot:
                taxels = contact.taxels or ()
                if len(set(taxels)) > 1:
                    errors.append(f"{contact.name} mixed taxel state {taxels}")
    finally:
        stop.set()
        for worker in workers:
            worker.join(timeout=2.0)

    assert not errors
    assert set(merger.compute_contacts(0.0).names()) == set(names)
