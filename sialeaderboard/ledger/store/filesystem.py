"""Filesystem-based SnapshotStore implementation.

The whole ledger lives in one JSON file. Saves write a temp file next to it
and rename it over the old one, so a crash mid-write leaves the previous
snapshot intact.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from sialeaderboard.ledger.models import LedgerSnapshot


class SnapshotCorruptError(Exception):
    """The snapshot file exists but cannot be decoded."""


class FilesystemStore:
    """Local JSON file SnapshotStore implementation."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    def load(self) -> LedgerSnapshot | None:
        """Read the snapshot. Missing file -> None, unreadable file -> SnapshotCorruptError."""
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                data = json.load(f)
            return LedgerSnapshot.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise SnapshotCorruptError(f"{self.path}: {e}") from e

    def save(self, snapshot: LedgerSnapshot) -> None:
        """Atomically write the snapshot to disk (tmp + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = snapshot.model_dump(mode="json")
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(tmp_fd, "w") as f:
                json.dump(data, f, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


__all__ = ["FilesystemStore", "SnapshotCorruptError"]
