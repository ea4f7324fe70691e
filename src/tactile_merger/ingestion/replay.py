"""Replay recorded tactile logs as a stream of :class:`TactileState` messages."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

import pandas as pd

from .messages import SensorReading, TactileState

TAXEL_PREFIX = "taxel_"


def _normalise_sensors(sensors: str | Iterable[str] | None) -> tuple[str, ...]:
    if sensors is None:
        return ()
    if isinstance(sensors, str):
        return (sensors,)
    return tuple(sensors)


def _taxel_index(column: str) -> int:
    return int(column[len(TAXEL_PREFIX):])


@dataclass(slots=True)
class ReplayTactileStates:
    """Group a long-format tactile log into timestamped state messages.

    The log holds one row per sensor reading with columns ``timestamp``,
    ``sensor`` and ``taxel_0`` … ``taxel_N``. Sensors with fewer taxels pad the
    remaining columns with NaN; trailing NaNs are stripped on replay.
    """

    path: str
    sensors: str | Iterable[str] | None = None
    time_column: str = "timestamp"
    sensor_column: str = "sensor"
    time_offset_s: float = 0.0
    _path: Path = field(init=False, repr=False)
    _sensor_filter: tuple[str, ...] = field(init=False, default=(), repr=False)
    _frame: pd.DataFrame | None = field(init=False, default=None, repr=False)
    _taxel_columns: tuple[str, ...] = field(init=False, default=(), repr=False)

    def __post_init__(self) -> None:
        self._path = Path(self.path).expanduser()
        self._sensor_filter = _normalise_sensors(self.sensors)

    def probe(self) -> None:
        """Ensure the log exists before attempting to load it."""
        if not self._path.exists():
            raise FileNotFoundError(self._path)

    def load(self) -> None:
        """Read and filter the log; must be called before iterating."""
        self.probe()
        frame = self._load_frame()
        for column in (self.time_column, self.sensor_column):
            if column not in frame.columns:
                raise KeyError(f"ReplayTactileStates missing required column '{column}'")
        taxels = sorted(
            (c for c in frame.columns if str(c).startswith(TAXEL_PREFIX)),
            key=_taxel_index,
        )
        if not taxels:
            raise ValueError("ReplayTactileStates log has no taxel_* columns")
        if self._sensor_filter:
            frame = frame[frame[self.sensor_column].isin(self._sensor_filter)]
        if frame.empty:
            raise ValueError("ReplayTactileStates log is empty after filtering")
        self._frame = frame.sort_values(self.time_column, kind="stable").reset_index(drop=True)
        self._taxel_columns = tuple(taxels)

    def __len__(self) -> int:
        if self._frame is None:
            return 0
        return int(self._frame[self.time_column].nunique())

    def __iter__(self) -> Iterator[TactileState]:
        if self._frame is None:
            raise RuntimeError("ReplayTactileStates.load() must be called before iterating")
        for stamp, group in self._frame.groupby(self.time_column, sort=True):
            readings = tuple(
                SensorReading(
                    name=str(row[self.sensor_column]),
                    values=self._row_values(row),
                )
                for _, row in group.iterrows()
            )
            yield TactileState(timestamp=float(stamp) + self.time_offset_s, sensors=readings)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_frame(self) -> pd.DataFrame:
        suffix = self._path.suffix.lower()
        if suffix == ".parquet":
            return pd.read_parquet(self._path)
        if suffix in {".feather", ".arrow"}:
            return pd.read_feather(self._path)
        return pd.read_csv(self._path)

    def _row_values(self, row: pd.Series) -> tuple[float, ...]:
        values = [float(row[column]) for column in self._taxel_columns]
        while values and math.isnan(values[-1]):
            values.pop()
        return tuple(values)
