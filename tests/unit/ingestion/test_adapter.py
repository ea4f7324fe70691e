"""Tests for demultiplexing tactile state messages into merger updates."""

from __future__ import annotations

import pytest

from tactile_merger.config import MergerConfig
from tactile_merger.ingestion import SensorReading, TactileState, TactileStateAdapter, TimedFeed
from tactile_merger.merger import TactileMerger


class _RecordingMerger:
    def __init__(self) -> None:
        self.calls: list[tuple[float, str, tuple[float, ...]]] = []

    def update(self, timestamp, name, values) -> bool:
        self.calls.append((timestamp, name, tuple(values)))
        return bool(values)


def test_adapter_calls_update_once_per_reading_with_shared_timestamp() -> None:
    recorder = _RecordingMerger()
    adapter = TactileStateAdapter(recorder)  # type: ignore[arg-type]
    message = TactileState(
        timestamp=3.5,
        sensors=(
            SensorReading("palm", (0.1, 0.2)),
            SensorReading("tip", (0.9,)),
            SensorReading("broken", ()),
        ),
    )
    accepted = adapter.handle(message)
    assert accepted == 2
    assert recorder.calls == [
        (3.5, "palm", (0.1, 0.2)),
        (3.5, "tip", (0.9,)),
        (3.5, "broken", ()),
    ]
    assert adapter.messages_handled == 1


def test_bad_reading_does_not_block_rest_of_message() -> None:
    """One malformed sensor entry is skipped while the others are merged."""
    merger = TactileMerger(MergerConfig(threshold=0.5, timeout_s=1.0))
    adapter = TactileStateAdapter(merger)
    message = TactileState.from_mapping(
        {
            "timestamp": 1.0,
            "sensors": [
                {"name": "palm", "values": [0.9, 0.1]},
                {"name": "tip", "values": [float("nan")]},
                {"name": "thumb", "values": [0.7]},
            ],
        }
    )
    assert adapter.handle(message) == 2
    snapshot = merger.compute_contacts(1.0)
    assert snapshot.names() == ("palm", "thumb")
    assert merger.diagnostics.sensor("tip").rejected == 1


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"sensors": []},
        {"timestamp": "later", "sensors": []},
        {"timestamp": 0.0, "sensors": "palm"},
        {"timestamp": 0.0, "sensors": [3]},
        {"timestamp": 0.0, "sensors": [{"values": [0.1]}]},
        {"timestamp": 0.0, "sensors": [{"name": "palm", "values": "0.1"}]},
    ],
)
def test_from_mapping_rejects_malformed_envelopes(payload) -> None:
    with pytest.raises(ValueError):
        TactileState.from_mapping(payload)


def test_timed_feed_releases_messages_as_time_passes() -> None:
    recorder = _RecordingMerger()
    adapter = TactileStateAdapter(recorder)  # type: ignore[arg-type]
    messages = [
        TactileState(timestamp=stamp, sensors=(SensorReading("palm", (0.1,)),))
        for stamp in (0.0, 0.05, 0.1, 0.3)
    ]
    feed = TimedFeed(adapter, messages)
    assert feed(0.0) == 1
    assert feed(0.1) == 2
    assert not feed.exhausted
    assert feed(0.2) == 0
    assert feed(1.0) == 1
    assert feed.exhausted
    assert [call[0] for call in recorder.calls] == [0.0, 0.05, 0.1, 0.3]
