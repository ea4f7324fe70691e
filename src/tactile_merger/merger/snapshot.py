"""Immutable contact summaries produced by the merger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True, slots=True)
class SensorContact:
    """Contact summary for one sensor at snapshot time.

    Args:
        name: Sensor identifier.
        timestamp: Capture time of the sample the summary was derived from.
        age_s: ``snapshot.timestamp - timestamp``.
        stale: ``True`` when the sample is older than the sensor's timeout.
        in_contact: At least one taxel is active; always ``False`` when stale.
        active_taxels: Indices of taxels classified as in contact.
        taxels: Per-taxel contact flags, ``None`` in ``'sensor'`` mode.
        peak_value: Largest reading of a fresh sample, ``None`` when stale.
        threshold: Activation threshold applied to the sensor.
    """

    name: str
    timestamp: float
    age_s: float
    stale: bool
    in_contact: bool
    active_taxels: tuple[int, ...]
    taxels: tuple[bool, ...] | None
    peak_value: float | None
    threshold: float

    @property
    def fresh(self) -> bool:
        """Inverse of :attr:`stale`."""
        return not self.stale


@dataclass(frozen=True, slots=True)
class ContactSnapshot:
    """Point-in-time contact state of every known sensor, ordered by name."""

    timestamp: float
    contacts: tuple[SensorContact, ...] = ()

    def __iter__(self) -> Iterator[SensorContact]:
        return iter(self.contacts)

    def __len__(self) -> int:
        return len(self.contacts)

    def __getitem__(self, name: str) -> SensorContact:
        for contact in self.contacts:
            if contact.name == name:
                return contact
        raise KeyError(name)

    def names(self) -> tuple[str, ...]:
        """Sensor names contained in the snapshot."""
        return tuple(contact.name for contact in self.contacts)

    def active(self) -> tuple[SensorContact, ...]:
        """Records of sensors currently in contact."""
        return tuple(contact for contact in self.contacts if contact.in_contact)

    def stale(self) -> tuple[SensorContact, ...]:
        """Records of sensors whose data exceeded their timeout."""
        return tuple(contact for contact in self.contacts if contact.stale)
