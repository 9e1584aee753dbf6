"""Materialise a new project from the skeleton application archive.

Each run walks an explicit state machine::

    RESOLVE_REVISION --(network failure)--> USE_CACHED_FALLBACK
            |                                       |
            v                                       v
    ENSURE_ARCHIVE --(not cached)--> DOWNLOAD_ARCHIVE
            |                                       |
            v                                       v
    PREFLIGHT_TARGET -> EXTRACT_AND_MERGE -> FINALIZE

Only a failed revision lookup is recoverable (through the cache); a failed
download of a revision that *was* resolved is fatal.  The target directory is
checked before any network traffic and again right before extraction, and an
existing target is never written to.
"""

from __future__ import annotations

import shutil
import tempfile
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from zfscaffold.errors import ArchiveError, NetworkError, ScaffoldIOError, ValidationError
from zfscaffold.skeleton.cache import SkeletonArchive, SkeletonCache
from zfscaffold.skeleton.client import SkeletonClient


class BootstrapState(str, Enum):
    RESOLVE_REVISION = "resolve_revision"
    USE_CACHED_FALLBACK = "use_cached_fallback"
    ENSURE_ARCHIVE = "ensure_archive"
    DOWNLOAD_ARCHIVE = "download_archive"
    PREFLIGHT_TARGET = "preflight_target"
    EXTRACT_AND_MERGE = "extract_and_merge"
    FINALIZE = "finalize"


@dataclass
class BootstrapResult:
    target: Path
    revision: str = ""
    archive: Path | None = None
    used_fallback: bool = False
    downloaded: bool = False
    fallback_reason: str = ""
    states: list[BootstrapState] = field(default_factory=list)


class SkeletonBootstrap:
    """Creates a project directory from the newest (or cached) skeleton."""

    def __init__(self, client: SkeletonClient, cache: SkeletonCache) -> None:
        self.client = client
        self.cache = cache

    def run(self, target: str | Path) -> BootstrapResult:
        """Create *target* from the skeleton archive.

        Raises:
            ValidationError: If *target* already exists.
            NetworkError: If the remote is unreachable and nothing is cached.
            ArchiveError: If the archive cannot be downloaded or extracted.
            ScaffoldIOError: If copying into *target* fails.
        """
        result = BootstrapResult(target=Path(target))
        self._check_target(result.target)

        handlers = {
            BootstrapState.RESOLVE_REVISION: self._resolve_revision,
            BootstrapState.USE_CACHED_FALLBACK: self._use_cached_fallback,
            BootstrapState.ENSURE_ARCHIVE: self._ensure_archive,
            BootstrapState.DOWNLOAD_ARCHIVE: self._download_archive,
            BootstrapState.PREFLIGHT_TARGET: self._preflight_target,
            BootstrapState.EXTRACT_AND_MERGE: self._extract_and_merge,
        }
        state = BootstrapState.RESOLVE_REVISION
        while state is not BootstrapState.FINALIZE:
            result.states.append(state)
            state = handlers[state](result)
        result.states.append(BootstrapState.FINALIZE)
        return result

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _resolve_revision(self, result: BootstrapResult) -> BootstrapState:
        try:
            result.revision = self.client.latest_revision()
        except NetworkError as exc:
            result.fallback_reason = exc.message
            return BootstrapState.USE_CACHED_FALLBACK
        return BootstrapState.ENSURE_ARCHIVE

    def _use_cached_fallback(self, result: BootstrapResult) -> BootstrapState:
        cached = self.cache.latest()
        if cached is None:
            raise NetworkError(
                f"Cannot reach the skeleton repository and no archive is cached "
                f"({result.fallback_reason})",
                step=BootstrapState.USE_CACHED_FALLBACK.value,
            )
        result.revision = cached.revision
        result.archive = cached.path
        result.used_fallback = True
        return BootstrapState.PREFLIGHT_TARGET

    def _ensure_archive(self, result: BootstrapResult) -> BootstrapState:
        cached = self.cache.get(result.revision)
        if cached is None:
            return BootstrapState.DOWNLOAD_ARCHIVE
        result.archive = cached.path
        return BootstrapState.PREFLIGHT_TARGET

    def _download_archive(self, result: BootstrapResult) -> BootstrapState:
        destination = self.cache.path_for(result.revision)
        try:
            self.client.download_archive(result.revision, destination)
        except ArchiveError as exc:
            raise ArchiveError(exc.message, step=BootstrapState.DOWNLOAD_ARCHIVE.value) from exc
        result.archive = destination
        result.downloaded = True
        return BootstrapState.PREFLIGHT_TARGET

    def _preflight_target(self, result: BootstrapResult) -> BootstrapState:
        self._check_target(result.target)
        return BootstrapState.EXTRACT_AND_MERGE

    def _extract_and_merge(self, result: BootstrapResult) -> BootstrapState:
        archive = SkeletonArchive(result.revision, result.archive)
        step = BootstrapState.EXTRACT_AND_MERGE.value
        with tempfile.TemporaryDirectory(prefix="zfscaffold-") as tmp_dir:
            root = _extract(archive, Path(tmp_dir), step)
            try:
                shutil.copytree(root, result.target)
            except (OSError, shutil.Error) as exc:
                raise ScaffoldIOError(
                    f"Error during the copy of the files in {result.target}: {exc}", step=step
                ) from exc
        return BootstrapState.FINALIZE

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_target(target: Path) -> None:
        if target.exists():
            raise ValidationError(
                f"The directory {target} already exists. You cannot create a project here.",
                step=BootstrapState.PREFLIGHT_TARGET.value,
            )


def _extract(archive: SkeletonArchive, destination: Path, step: str) -> Path:
    """Extract *archive* into *destination* and return its single root directory."""
    try:
        with zipfile.ZipFile(archive.path) as bundle:
            roots = {name.split("/", 1)[0] for name in bundle.namelist() if name.strip("/")}
            if len(roots) != 1:
                raise ArchiveError(
                    f"The archive {archive.path} must contain exactly one top-level "
                    f"directory, found {len(roots)}",
                    step=step,
                )
            bundle.extractall(destination)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ArchiveError(f"Error during the unzip of {archive.path}: {exc}", step=step) from exc

    root = destination / roots.pop()
    if not root.is_dir():
        raise ArchiveError(f"The archive {archive.path} has no top-level directory", step=step)
    return root
