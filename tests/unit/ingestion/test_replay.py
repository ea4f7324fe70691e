from __future__ import annotations

import math
from pathlib import Path

import pandas as pd
import pytest

from tactile_merger.ingestion import ReplayTactileStates


def _write_csv(tmp_path: Path, name: str, frame: pd.DataFrame) -> Path:
    path = tmp_path / name
    frame.to_csv(path, index=False)
    return path


def _log_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "timestamp": [0.02, 0.0, 0.0, 0.01],
            "sensor": ["palm", "palm", "tip", "tip"],
            "taxel_0": [0.1, 0.2, 0.9, 0.8],
            "taxel_1": [0.3, 0.4, math.nan, math.nan],
            "taxel_10": [0.5, 0.6, math.nan, math.nan],
        }
    )


def test_replay_groups_rows_by_timestamp(tmp_path):
    path = _write_csv(tmp_path, "tactile.csv", _log_frame())
    replay = ReplayTactileStates(path=str(path))
    replay.load()
    messages = list(replay)

    assert len(replay) == 3
    assert [m.timestamp for m in messages] == pytest.approx([0.0, 0.01, 0.02])
    first = messages[0]
    assert [r.name for r in first.sensors] == ["palm", "tip"]
    assert first.sensors[0].values == pytest.approx((0.2, 0.4, 0.6))
    assert first.sensors[1].values == pytest.approx((0.9,))


def test_replay_filters_sensors_and_applies_offset(tmp_path):
    path = _write_csv(tmp_path, "tactile.csv", _log_frame())
    replay = ReplayTactileStates(path=str(path), sensors="tip", time_offset_s=10.0)
    replay.load()
    messages = list(replay)
    assert [m.timestamp for m in messages] == pytest.approx([10.0, 10.01])
    assert all(r.name == "tip" for m in messages for r in m.sensors)


def test_replay_requires_load_and_columns(tmp_path):
    replay = ReplayTactileStates(path=str(tmp_path / "missing.csv"))
    with pytest.raises(RuntimeError):
        list(replay)
    with pytest.raises(FileNotFoundError):
        replay.load()

    frame = pd.DataFrame({"timestamp": [0.0], "sensor": ["palm"]})
    no_taxels = ReplayTactileStates(path=str(_write_csv(tmp_path, "bad.csv", frame)))
    with pytest.raises(ValueError):
        no_taxels.load()

    frame = pd.DataFrame({"time": [0.0], "sensor": ["palm"], "taxel_0": [0.1]})
    no_time = ReplayTactileStates(path=str(_write_csv(tmp_path, "bad2.csv", frame)))
    with pytest.raises(KeyError):
        no_time.load()


def test_replay_empty_after_filter(tmp_path):
    path = _write_csv(tmp_path, "tactile.csv", _log_frame())
    replay = ReplayTactileStates(path=str(path), sensors=["thumb"])
    with pytest.raises(ValueError):
        replay.load()
