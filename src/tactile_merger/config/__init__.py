"""Convenience exports for merger configuration and profile loading."""

from __future__ import annotations

from .loader import MergerProfile, load_merger_config, load_merger_profile, parse_merger_config
from .models import (
    CONTACT_MODES,
    MergerConfig,
    MergerConfigError,
    PublisherConfig,
    SensorOverride,
    validate_merger_config,
)

__all__ = [
    "CONTACT_MODES",
    "MergerConfig",
    "MergerConfigError",
    "MergerProfile",
    "PublisherConfig",
    "SensorOverride",
    "load_merger_config",
    "load_merger_profile",
    "parse_merger_config",
    "validate_merger_config",
]
