"""Tests for the replay CLI wiring the merger, adapter and publisher together."""

from __future__ import annotations

import csv
import importlib.util
import logging
from pathlib import Path

import pandas as pd

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "run.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("tactile_merger_run_script", SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_replay_cli_writes_contacts(tmp_path: Path) -> None:
    log = tmp_path / "tactile.csv"
    pd.DataFrame(
        {
            "timestamp": [0.0, 0.0, 0.03],
            "sensor": ["palm", "fingertip", "fingertip"],
            "taxel_0": [0.9, 0.0, 0.0],
            "taxel_1": [0.1, 0.9, float("nan")],
        }
    ).to_csv(log, index=False)
    profile = tmp_path / "profile.yaml"
    profile.write_text("merger: { threshold: 0.5, timeout_s: 1.0 }\npublisher: { frequency_hz: 100 }\n")
    output = tmp_path / "contacts.csv"

    run = _load_script()
    code = run.main([str(log), "--config", str(profile), "--output", str(output)])

    assert code == 0
    with output.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert {row["sensor"] for row in rows} == {"palm", "fingertip"}
    first_palm = next(row for row in rows if row["sensor"] == "palm")
    assert first_palm["active_taxels"] == "0"
    fingertip_rows = [row for row in rows if row["sensor"] == "fingertip"]
    assert fingertip_rows[0]["active_taxels"] == "1"


def test_replay_cli_reports_rejected_updates_and_bad_config(tmp_path: Path) -> None:
    log = tmp_path / "tactile.csv"
    pd.DataFrame(
        {
            "timestamp": [0.0, 0.01],
            "sensor": ["palm", "palm"],
            "taxel_0": [0.9, 0.9],
            "taxel_1": [0.1, float("nan")],
        }
    ).to_csv(log, index=False)
    run = _load_script()

    bad_profile = tmp_path / "bad.yaml"
    bad_profile.write_text("merger: { threshold: 0.0, timeout_s: 1.0 }\n")
    assert run.main([str(log), "--config", str(bad_profile)]) == 1
    assert run.main([str(tmp_path / "missing.csv")]) == 1

    good_profile = tmp_path / "good.yaml"
    good_profile.write_text("merger: { threshold: 0.5, timeout_s: 1.0 }\n")
    assert run.main([str(log), "--config", str(good_profile)]) == 0


def test_quiet_rejections_raises_merger_log_level(tmp_path: Path) -> None:
    log = tmp_path / "tactile.csv"
    pd.DataFrame({"timestamp": [0.0], "sensor": ["palm"], "taxel_0": [0.9]}).to_csv(log, index=False)
    profile = tmp_path / "profile.yaml"
    profile.write_text("merger: { threshold: 0.5, timeout_s: 1.0 }\n")
    merger_logger = logging.getLogger("tactile_merger.merger")
    run = _load_script()
    try:
        assert run.main([str(log), "--config", str(profile), "--quiet-rejections"]) == 0
        assert merger_logger.level == logging.ERROR
    finally:
        merger_logger.setLevel(logging.NOTSET)
