"""Snapshot sources: collaborators that hand the engine a group's data.

The engine never performs storage I/O itself. A source is responsible for
returning one consistent snapshot (members and expenses read together).
"""

import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from .exceptions import SnapshotError
from .models import GroupSnapshot

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    """Anything that can load a group snapshot by id."""

    def load_snapshot(self, group_id: int) -> GroupSnapshot: ...


class InMemorySnapshotSource:
    """Serves snapshots held in memory, keyed by group id."""

    def __init__(self, snapshots: list[GroupSnapshot] | None = None):
        self.snapshots: dict[int, GroupSnapshot] = {
            snapshot.group_id: snapshot for snapshot in snapshots or []
        }

    def add(self, snapshot: GroupSnapshot) -> None:
        self.snapshots[snapshot.group_id] = snapshot

    def load_snapshot(self, group_id: int) -> GroupSnapshot:
        try:
            return self.snapshots[group_id]
        except KeyError:
            raise SnapshotError(f"No snapshot for group {group_id}") from None


class JsonSnapshotSource:
    """Reads a single group snapshot from a JSON document on disk."""

    def __init__(self, path: Path):
        """Initialize the source."""
        self.path = path

    def read(self) -> GroupSnapshot:
        """
        Parse and validate the snapshot file.

        Returns:
            The validated snapshot

        Raises:
            SnapshotError: If the file is missing or not a valid snapshot
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise SnapshotError(f"Cannot read snapshot {self.path}: {e}") from e

        try:
            snapshot = GroupSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise SnapshotError(f"Invalid snapshot {self.path}:\n{e}") from e

        logger.info(
            f"Loaded snapshot for group {snapshot.group_id}: "
            f"{len(snapshot.members)} members, {len(snapshot.expenses)} expenses"
        )
        return snapshot

    def load_snapshot(self, group_id: int) -> GroupSnapshot:
        snapshot = self.read()
        if snapshot.group_id != group_id:
            raise SnapshotError(
                f"Snapshot {self.path} holds group {snapshot.group_id}, "
                f"not group {group_id}"
            )
        return snapshot
