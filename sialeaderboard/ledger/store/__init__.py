from .filesystem import FilesystemStore, SnapshotCorruptError
from .interface import SnapshotStore

__all__ = ["FilesystemStore", "SnapshotCorruptError", "SnapshotStore"]
