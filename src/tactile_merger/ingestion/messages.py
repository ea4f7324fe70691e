"""Message types carried on the tactile ingestion boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(frozen=True, slots=True)
class SensorReading:
    """Values reported by one named sensor inside a state message."""

    name: str
    values: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class TactileState:
    """A bundle of sensor readings captured at a single timestamp.

    Args:
        timestamp: Capture time in seconds shared by every reading.
        sensors: Readings contained in the message, in transport order.
    """

    timestamp: float
    sensors: tuple[SensorReading, ...] = ()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TactileState":
        """Parse a decoded ``{"timestamp": ..., "sensors": [...]}`` payload.

        Individual readings are not validated here; the merger rejects bad
        values per sensor so that one malformed entry cannot drop the message.

        Raises:
            ValueError: If the envelope itself is malformed.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Tactile state payload must be a mapping")
        if "timestamp" not in payload:
            raise ValueError("Tactile state payload missing 'timestamp'")
        try:
            timestamp = float(payload["timestamp"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid tactile state timestamp {payload['timestamp']!r}") from exc
        entries = payload.get("sensors", [])
        if not isinstance(entries, Sequence) or isinstance(entries, (str, bytes)):
            raise ValueError("'sensors' entry in tactile state must be a list")
        readings: list[SensorReading] = []
        for idx, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                raise ValueError(f"Sensor entry #{idx} must be a mapping with 'name' and 'values'")
            name = entry.get("name")
            if name is None:
                raise ValueError(f"Sensor entry #{idx} missing 'name'")
            values = entry.get("values", ())
            if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
                raise ValueError(f"Sensor entry '{name}' values must be a list")
            readings.append(SensorReading(name=str(name), values=tuple(values)))
        return cls(timestamp=timestamp, sensors=tuple(readings))
