"""Merger package: latest-value store, contact classification, diagnostics."""

from .core import MergerNotInitialisedError, TactileMerger
from .diagnostics import MergerDiagnostics, SensorUpdateStats
from .snapshot import ContactSnapshot, SensorContact
from .store import SampleRejectedError, SensorReadingStore, SensorSample

__all__ = [
    "TactileMerger",
    "MergerNotInitialisedError",
    "MergerDiagnostics",
    "SensorUpdateStats",
    "ContactSnapshot",
    "SensorContact",
    "SensorReadingStore",
    "SensorSample",
    "SampleRejectedError",
]
