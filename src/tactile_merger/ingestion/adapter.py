"""Demultiplex tactile state messages into per-sensor merger updates."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from ..merger.core import TactileMerger
from .messages import TactileState

LOGGER = logging.getLogger(__name__)


class TactileStateAdapter:
    """Forward every reading of a :class:`TactileState` to a merger."""

    def __init__(self, merger: TactileMerger) -> None:
        self._merger = merger
        self._messages = 0

    @property
    def messages_handled(self) -> int:
        """Number of messages passed to :meth:`handle`."""
        return self._messages

    def handle(self, message: TactileState) -> int:
        """Update the merger once per contained sensor using the shared timestamp.

        Returns:
            int: Number of readings the merger accepted.
        """
        self._messages += 1
        accepted = 0
        for reading in message.sensors:
            if self._merger.update(message.timestamp, reading.name, reading.values):
                accepted += 1
        if accepted != len(message.sensors):
            LOGGER.debug(
                "Tactile state at %.6f: accepted %d of %d readings",
                message.timestamp,
                accepted,
                len(message.sensors),
            )
        return accepted

    def handle_all(self, messages: Iterable[TactileState]) -> int:
        """Handle a batch of messages and return the total accepted readings."""
        return sum(self.handle(message) for message in messages)


class TimedFeed:
    """Release time-ordered messages to an adapter as a clock passes them.

    Used as the ``feed`` callback of ``ContactPublisher.run`` when replaying a
    recorded log on the publish thread.
    """

    def __init__(self, adapter: TactileStateAdapter, messages: Iterable[TactileState]) -> None:
        self._adapter = adapter
        self._messages: Iterator[TactileState] = iter(messages)
        self._pending: TactileState | None = next(self._messages, None)

    @property
    def exhausted(self) -> bool:
        """Whether every message has been delivered."""
        return self._pending is None

    def __call__(self, now: float) -> int:
        """Deliver every message stamped at or before ``now``."""
        delivered = 0
        while self._pending is not None and self._pending.timestamp <= now:
            self._adapter.handle(self._pending)
            delivered += 1
            self._pending = next(self._messages, None)
        return delivered
