"""Configuration models for the tactile merger and its publish driver.

The models stay declarative; validation happens in :func:`validate_merger_config`
so that configurations can be assembled piecemeal before the merger consumes
them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

CONTACT_MODES: tuple[str, ...] = ("taxel", "sensor")


class MergerConfigError(ValueError):
    """Raised when a merger configuration is missing or invalid."""


@dataclass(slots=True)
class SensorOverride:
    """Per-sensor replacement for the global threshold and/or timeout."""

    threshold: float | None = None
    timeout_s: float | None = None


@dataclass(slots=True)
class MergerConfig:
    """Thresholding and staleness policy consumed by ``TactileMerger.init``."""

    threshold: float
    """Activation threshold; taxels above it are classified as in contact."""

    timeout_s: float
    """Maximum sample age (seconds) before a sensor is reported stale."""

    contact_mode: str = "taxel"
    """``'taxel'`` emits per-taxel vectors, ``'sensor'`` only whole-sensor flags."""

    inclusive_threshold: bool = False
    """Treat values equal to the threshold as in contact."""

    sensors: dict[str, SensorOverride] = field(default_factory=dict)

    def threshold_for(self, name: str) -> float:
        """Return the activation threshold applied to ``name``."""
        override = self.sensors.get(name)
        if override is not None and override.threshold is not None:
            return override.threshold
        return self.threshold

    def timeout_for(self, name: str) -> float:
        """Return the staleness timeout applied to ``name``."""
        override = self.sensors.get(name)
        if override is not None and override.timeout_s is not None:
            return override.timeout_s
        return self.timeout_s


@dataclass(slots=True)
class PublisherConfig:
    """Cadence of the external publish loop."""

    frequency_hz: float = 100.0


def _check_positive(value: object, label: str) -> float:
    if value is None or isinstance(value, bool):
        raise MergerConfigError(f"{label} is required and must be a positive number")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise MergerConfigError(f"{label} must be numeric, got {value!r}") from exc
    if not math.isfinite(number) or number <= 0.0:
        raise MergerConfigError(f"{label} must be finite and positive, got {value!r}")
    return number


def validate_merger_config(config: MergerConfig | None) -> MergerConfig:
    """Normalise ``config`` in place and return it.

    Raises:
        MergerConfigError: If the threshold, timeout, contact mode or any
            per-sensor override is missing or invalid.
    """
    if config is None:
        raise MergerConfigError("Merger configuration is required")
    if not isinstance(config, MergerConfig):
        raise MergerConfigError(
            f"Expected MergerConfig instance, got {type(config).__name__}"
        )
    config.threshold = _check_positive(config.threshold, "threshold")
    config.timeout_s = _check_positive(config.timeout_s, "timeout_s")
    mode = str(config.contact_mode).lower()
    if mode not in CONTACT_MODES:
        raise MergerConfigError(
            f"contact_mode must be one of {CONTACT_MODES}, got {config.contact_mode!r}"
        )
    config.contact_mode = mode
    config.inclusive_threshold = bool(config.inclusive_threshold)

    overrides: dict[str, SensorOverride] = {}
    for name, override in dict(config.sensors).items():
        if not isinstance(name, str) or not name:
            raise MergerConfigError("Sensor override names must be non-empty strings")
        if not isinstance(override, SensorOverride):
            raise MergerConfigError(f"Override for sensor '{name}' must be a SensorOverride")
        threshold = override.threshold
        timeout = override.timeout_s
        if threshold is not None:
            threshold = _check_positive(threshold, f"sensors.{name}.threshold")
        if timeout is not None:
            timeout = _check_positive(timeout, f"sensors.{name}.timeout_s")
        overrides[name] = SensorOverride(threshold=threshold, timeout_s=timeout)
    config.sensors = overrides
    return config


def validate_publisher_config(config: PublisherConfig) -> PublisherConfig:
    """Ensure the publish cadence is usable by the scheduler."""
    config.frequency_hz = _check_positive(config.frequency_hz, "frequency_hz")
    return config


def overrides_from_mapping(raw: Mapping[str, object]) -> dict[str, SensorOverride]:
    """Build :class:`SensorOverride` entries from a plain mapping."""
    overrides: dict[str, SensorOverride] = {}
    for name, payload in raw.items():
        if not isinstance(payload, Mapping):
            raise MergerConfigError(f"Sensor override '{name}' must be a mapping")
        unknown = set(payload) - {"threshold", "timeout_s"}
        if unknown:
            raise MergerConfigError(
                f"Sensor override '{name}' has unknown keys {sorted(unknown)}"
            )
        overrides[str(name)] = SensorOverride(
            threshold=payload.get("threshold"),  # type: ignore[arg-type]
            timeout_s=payload.get("timeout_s"),  # type: ignore[arg-type]
        )
    return overrides
