"""Load merger and publisher configuration from YAML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import (
    MergerConfig,
    MergerConfigError,
    PublisherConfig,
    overrides_from_mapping,
    validate_merger_config,
    validate_publisher_config,
)

_MERGER_KEYS = {"threshold", "timeout_s", "contact_mode", "inclusive_threshold", "sensors"}


@dataclass(slots=True)
class MergerProfile:
    """Merger policy plus the cadence of the loop publishing it."""

    name: str
    merger: MergerConfig
    publisher: PublisherConfig


def load_merger_profile(path: str | Path) -> MergerProfile:
    """Parse a YAML profile describing the merger policy and publish rate.

    Args:
        path: Filesystem path to the profile YAML file.

    Returns:
        MergerProfile: Validated merger and publisher configuration.

    Raises:
        FileNotFoundError: If the profile path does not exist.
        MergerConfigError: When the ``merger`` section is missing or invalid.
    """
    profile_path = Path(path)
    if not profile_path.exists():
        raise FileNotFoundError(profile_path)
    with profile_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, Mapping):
        raise MergerConfigError("Profile YAML must contain a top-level mapping")

    merger = parse_merger_config(raw.get("merger"))
    publisher = _parse_publisher(raw.get("publisher", {}))
    name = str(raw.get("name", profile_path.stem))
    return MergerProfile(name=name, merger=merger, publisher=publisher)


def load_merger_config(path: str | Path) -> MergerConfig:
    """Return only the validated merger section of a YAML profile."""
    return load_merger_profile(path).merger


def parse_merger_config(section: Any) -> MergerConfig:
    """Build a :class:`MergerConfig` from a decoded ``merger`` mapping."""
    if not isinstance(section, Mapping):
        raise MergerConfigError("Profile YAML missing 'merger' mapping")
    unknown = set(section) - _MERGER_KEYS
    if unknown:
        raise MergerConfigError(f"Unknown merger keys {sorted(unknown)}")
    for key in ("threshold", "timeout_s"):
        if key not in section:
            raise MergerConfigError(f"Merger mapping must include a '{key}' entry")
    sensors = section.get("sensors") or {}
    if not isinstance(sensors, Mapping):
        raise MergerConfigError("'sensors' entry in merger must be a mapping")
    config = MergerConfig(
        threshold=section["threshold"],
        timeout_s=section["timeout_s"],
        contact_mode=str(section.get("contact_mode", "taxel")),
        inclusive_threshold=bool(section.get("inclusive_threshold", False)),
        sensors=overrides_from_mapping(sensors),
    )
    return validate_merger_config(config)


def _parse_publisher(section: Any) -> PublisherConfig:
    if not isinstance(section, Mapping):
        raise MergerConfigError("'publisher' entry must be a mapping")
    config = PublisherConfig(frequency_hz=section.get("frequency_hz", 100.0))
    return validate_publisher_config(config)
