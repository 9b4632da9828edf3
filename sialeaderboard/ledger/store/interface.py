"""SnapshotStore protocol - pluggable persistence for the ledger.

Implementations: FilesystemStore (atomic JSON file).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sialeaderboard.ledger.models import LedgerSnapshot


@runtime_checkable
class SnapshotStore(Protocol):
    """Whole-state load/save for the ledger."""

    def load(self) -> LedgerSnapshot | None:
        """Return the last saved snapshot, or None if nothing was saved yet."""
        ...

    def save(self, snapshot: LedgerSnapshot) -> None:
        """Replace the stored snapshot."""
        ...


__all__ = ["SnapshotStore"]
