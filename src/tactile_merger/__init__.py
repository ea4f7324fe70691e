"""Merge asynchronous tactile sensor readings into fixed-rate contact snapshots."""

from .config import MergerConfig, MergerConfigError, SensorOverride, load_merger_config
from .ingestion import SensorReading, TactileState, TactileStateAdapter
from .merger import ContactSnapshot, MergerNotInitialisedError, SensorContact, TactileMerger
from .runtime import ContactPublisher

__version__ = "0.1.0"

__all__ = [
    "TactileMerger",
    "MergerConfig",
    "MergerConfigError",
    "MergerNotInitialisedError",
    "SensorOverride",
    "load_merger_config",
    "ContactSnapshot",
    "SensorContact",
    "SensorReading",
    "TactileState",
    "TactileStateAdapter",
    "ContactPublisher",
]
