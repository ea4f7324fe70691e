"""Latest-value buffer holding one sample per tactile sensor."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np


class SampleRejectedError(ValueError):
    """Raised by :meth:`SensorReadingStore.put` for malformed readings."""


@dataclass(frozen=True, slots=True)
class SensorSample:
    """Most recent observation of a single sensor.

    Args:
        name: Sensor identifier, unique within the store.
        timestamp: Source-supplied capture time in seconds.
        values: Read-only taxel readings; position ``i`` is always the same
            physical taxel.
    """

    name: str
    timestamp: float
    values: np.ndarray

    @property
    def taxels(self) -> int:
        """Number of taxels contained in the sample."""
        return int(self.values.shape[0])


def as_taxel_vector(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """Return ``values`` as a read-only, one-dimensional float64 copy."""
    try:
        vector = np.array(values, dtype=np.float64, copy=True)
    except (TypeError, ValueError) as exc:
        raise SampleRejectedError(f"values are not numeric ({exc})") from exc
    if vector.ndim != 1:
        raise SampleRejectedError(f"values must be one-dimensional, got shape {vector.shape}")
    if vector.size == 0:
        raise SampleRejectedError("values must not be empty")
    if not np.all(np.isfinite(vector)):
        bad = np.flatnonzero(~np.isfinite(vector)).tolist()
        raise SampleRejectedError(f"values contain non-finite readings at taxels {bad}")
    vector.setflags(write=False)
    return vector


class SensorReadingStore:
    """Mapping from sensor name to its latest :class:`SensorSample`.

    Entries are created on the first accepted reading for a name and the
    taxel count established then is enforced for the store's lifetime.
    """

    def __init__(self) -> None:
        self._samples: dict[str, SensorSample] = {}

    def __len__(self) -> int:
        return len(self._samples)

    def __contains__(self, name: object) -> bool:
        return name in self._samples

    def __iter__(self) -> Iterator[SensorSample]:
        return iter(tuple(self._samples.values()))

    def get(self, name: str) -> SensorSample | None:
        """Return the stored sample for ``name`` if present."""
        return self._samples.get(name)

    def names(self) -> tuple[str, ...]:
        """Names of every sensor seen so far."""
        return tuple(self._samples)

    def put(self, timestamp: float, name: str, values: Sequence[float] | np.ndarray) -> SensorSample:
        """Validate and store a reading, replacing any previous sample.

        Raises:
            SampleRejectedError: When the name, timestamp or values are
                malformed. The previously stored sample is left untouched.
        """
        if not isinstance(name, str) or not name:
            raise SampleRejectedError(f"sensor name must be a non-empty string, got {name!r}")
        try:
            stamp = float(timestamp)
        except (TypeError, ValueError) as exc:
            raise SampleRejectedError(f"timestamp {timestamp!r} is not numeric") from exc
        if not math.isfinite(stamp):
            raise SampleRejectedError(f"timestamp {timestamp!r} is not finite")
        vector = as_taxel_vector(values)
        previous = self._samples.get(name)
        if previous is not None and previous.taxels != vector.shape[0]:
            raise SampleRejectedError(
                f"taxel count changed from {previous.taxels} to {vector.shape[0]}"
            )
        sample = SensorSample(name=name, timestamp=stamp, values=vector)
        self._samples[name] = sample
        return sample

    def clear(self) -> None:
        """Forget every stored sample."""
        self._samples.clear()
