"""Ingestion boundary: state messages, the demultiplexing adapter, log replay."""

from .adapter import TactileStateAdapter, TimedFeed
from .messages import SensorReading, TactileState
from .replay import ReplayTactileStates

__all__ = [
    "SensorReading",
    "TactileState",
    "TactileStateAdapter",
    "TimedFeed",
    "ReplayTactileStates",
]
