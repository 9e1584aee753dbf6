"""On-disk cache of downloaded skeleton archives.

Entries are named ``<prefix><revision>.zip`` and are never deleted by the
engine.  When the remote source is unreachable, :meth:`SkeletonCache.latest`
picks the fallback: the entry with the newest modification time, ties broken
by the lexicographically greatest revision so the choice is deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SkeletonArchive:
    revision: str
    path: Path


class SkeletonCache:
    """Lookup of cached archives by revision."""

    def __init__(self, directory: Path, prefix: str = "ZF2_Skeleton_") -> None:
        self.directory = Path(directory)
        self.prefix = prefix

    def path_for(self, revision: str) -> Path:
        return self.directory / f"{self.prefix}{revision}.zip"

    def get(self, revision: str) -> SkeletonArchive | None:
        path = self.path_for(revision)
        return SkeletonArchive(revision, path) if path.is_file() else None

    def entries(self) -> list[SkeletonArchive]:
        if not self.directory.is_dir():
            return []
        return [
            SkeletonArchive(path.name[len(self.prefix) : -len(".zip")], path)
            for path in sorted(self.directory.glob(f"{self.prefix}*.zip"))
            if path.is_file()
        ]

    def latest(self) -> SkeletonArchive | None:
        """Return the most recently obtained archive, or ``None``."""
        entries = self.entries()
        if not entries:
            return None
        return max(entries, key=lambda entry: (entry.path.stat().st_mtime, entry.revision))
