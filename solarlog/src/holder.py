"""
Single-slot holder for the most recent successful Snapshot.

Exactly one writer (the acquisition task) calls ``publish``; any number of
logger tasks call ``current``. A publish is one reference assignment and
Snapshots are frozen, so readers always see either a complete Snapshot or
nothing, without taking a lock.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging

from solarlog.src.models import Snapshot

logger = logging.getLogger(__name__)


class SnapshotHolder:
    """Last-known-good Snapshot shared between the daemon's tasks.

    Usage::

        holder = SnapshotHolder()
        holder.current()          # None until the first success
        holder.publish(snapshot)
        holder.current()          # snapshot
    """

    def __init__(self) -> None:
        self._snapshot: Snapshot | None = None

    def publish(self, snapshot: Snapshot) -> None:
        """Replace the held Snapshot.

        Raises:
            TypeError: If *snapshot* is not a :class:`Snapshot`. Nothing
                else may ever become visible to readers.
        """
        if not isinstance(snapshot, Snapshot):
            raise TypeError(f"expected Snapshot, got {type(snapshot).__name__}")
        self._snapshot = snapshot
        logger.debug("Published snapshot captured at %s", snapshot.captured_at.isoformat())

    def current(self) -> Snapshot | None:
        """Return the latest published Snapshot, or ``None`` before the first."""
        return self._snapshot
