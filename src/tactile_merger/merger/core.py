"""Latest-value tactile merger producing fixed-rate contact snapshots."""

from __future__ import annotations

import logging
import threading
from typing import Sequence

import numpy as np

from ..config.models import MergerConfig, validate_merger_config
from .diagnostics import MergerDiagnostics
from .snapshot import ContactSnapshot, SensorContact
from .store import SampleRejectedError, SensorReadingStore, SensorSample

LOGGER = logging.getLogger(__name__)


class MergerNotInitialisedError(RuntimeError):
    """Raised when the merger is used before :meth:`TactileMerger.init`."""


class TactileMerger:
    """Reduce asynchronous per-sensor readings into contact snapshots.

    ``update`` is called from the ingestion path whenever a reading arrives and
    ``compute_contacts`` from the publish path once per tick. Both take the same
    lock, so a snapshot always reflects fully applied updates. The merger keeps
    no notion of wall-clock time; callers pass ``now`` explicitly.
    """

    def __init__(self, config: MergerConfig | None = None, *, diagnostics_window: int = 64) -> None:
        """Create a merger, initialising it immediately when ``config`` is given."""
        self._lock = threading.Lock()
        self._store = SensorReadingStore()
        self._diagnostics = MergerDiagnostics(window=diagnostics_window)
        self._config: MergerConfig | None = None
        if config is not None:
            self.init(config)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, config: MergerConfig) -> None:
        """Validate ``config`` and reset the merger to the empty state.

        Raises:
            MergerConfigError: If the threshold, timeout or overrides are
                missing or invalid. The previous state is kept in that case.
        """
        validated = validate_merger_config(config)
        with self._lock:
            self._config = validated
            self._store.clear()
            self._diagnostics.clear()
        LOGGER.info(
            "Tactile merger initialised (threshold=%.4f, timeout=%.3fs, mode=%s, overrides=%d)",
            validated.threshold,
            validated.timeout_s,
            validated.contact_mode,
            len(validated.sensors),
        )

    def reset(self) -> None:
        """Re-run :meth:`init` with the active configuration."""
        self.init(self._require_config())

    @property
    def initialised(self) -> bool:
        """Whether :meth:`init` has completed successfully."""
        return self._config is not None

    @property
    def config(self) -> MergerConfig:
        """Active configuration."""
        return self._require_config()

    @property
    def diagnostics(self) -> MergerDiagnostics:
        """Update statistics collected since the last :meth:`init`."""
        return self._diagnostics

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def update(self, timestamp: float, name: str, values: Sequence[float] | np.ndarray) -> bool:
        """Replace the stored sample for ``name`` with ``values``.

        Malformed readings are logged and skipped, leaving the previous sample
        for ``name`` and all other sensors untouched.

        Returns:
            bool: ``True`` when the reading was stored.
        """
        self._require_config()
        with self._lock:
            try:
                sample = self._store.put(timestamp, name, values)
            except SampleRejectedError as exc:
                self._diagnostics.record_reject(name, str(exc))
                LOGGER.warning("Rejected tactile update for sensor %r: %s", name, exc)
                return False
            backward = self._diagnostics.record_accept(sample.name, sample.timestamp)
        if backward:
            LOGGER.debug(
                "Sensor %r timestamp moved backward to %.6f; keeping latest call",
                name,
                sample.timestamp,
            )
        return True

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def compute_contacts(self, now: float) -> ContactSnapshot:
        """Classify every known sensor against its threshold at time ``now``."""
        config = self._require_config()
        with self._lock:
            samples = tuple(self._store)
        now = float(now)
        contacts = tuple(
            self._classify(sample, now, config)
            for sample in sorted(samples, key=lambda s: s.name)
        )
        return ContactSnapshot(timestamp=now, contacts=contacts)

    def sensor_names(self) -> tuple[str, ...]:
        """Names of every sensor that has delivered an accepted reading."""
        with self._lock:
            return self._store.names()

    def latest(self, name: str) -> SensorSample | None:
        """Return the stored sample for ``name``; its values are read-only."""
        with self._lock:
            return self._store.get(name)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_config(self) -> MergerConfig:
        config = self._config
        if config is None:
            raise MergerNotInitialisedError("TactileMerger.init() must be called first")
        return config

    @staticmethod
    def _classify(sample: SensorSample, now: float, config: MergerConfig) -> SensorContact:
        threshold = config.threshold_for(sample.name)
        age = now - sample.timestamp
        stale = age > config.timeout_for(sample.name)
        per_taxel = config.contact_mode == "taxel"

        if stale:
            return SensorContact(
                name=sample.name,
                timestamp=sample.timestamp,
                age_s=age,
                stale=True,
                in_contact=False,
                active_taxels=(),
                taxels=(False,) * sample.taxels if per_taxel else None,
                peak_value=None,
                threshold=threshold,
            )

        if config.inclusive_threshold:
            mask = sample.values >= threshold
        else:
            mask = sample.values > threshold
        active = tuple(int(index) for index in np.flatnonzero(mask))
        return SensorContact(
            name=sample.name,
            timestamp=sample.timestamp,
            age_s=age,
            stale=False,
            in_contact=bool(active),
            active_taxels=active,
            taxels=tuple(bool(flag) for flag in mask) if per_taxel else None,
            peak_value=float(sample.values.max()),
            threshold=threshold,
        )
