"""zfscaffold configuration.

Centralised, typed configuration for the scaffolding engine. All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from zfscaffold.codegen.models import RenderPolicy


def _default_cache_dir() -> Path:
    return Path(tempfile.gettempdir())


class SkeletonConfig(BaseModel):
    """Where the project template comes from and where downloads are kept."""

    repository: str = Field(default="zendframework/ZendSkeletonApplication")
    branch: str = Field(default="master")
    api_url: str = Field(
        default="https://api.github.com/repos/{repository}/commits?sha={branch}&per_page=1",
        description="URL template returning the latest commit of the template",
    )
    archive_url: str = Field(
        default="https://github.com/{repository}/archive/{revision}.zip",
        description="URL template of the zip archive for a revision",
    )
    cache_dir: Path = Field(default_factory=_default_cache_dir)
    cache_prefix: str = Field(default="ZF2_Skeleton_")
    connect_timeout: float = Field(default=5.0, gt=0, description="Seconds")
    read_timeout: float = Field(default=30.0, gt=0, description="Seconds")

    @property
    def latest_revision_url(self) -> str:
        return self.api_url.format(repository=self.repository, branch=self.branch)

    def archive_url_for(self, revision: str) -> str:
        """Return the download URL of the archive for *revision*."""
        return self.archive_url.format(repository=self.repository, revision=revision)


class GeneratorConfig(BaseModel):
    """Tuning knobs for generated source files."""

    source_extension: str = Field(default=".php")
    view_extension: str = Field(default=".phtml")
    backup_suffix: str = Field(default=".old")
    short_arrays: bool = Field(
        default=False, description="Render config arrays as [] instead of array()"
    )
    see_url: str = Field(default="https://github.com/zendframework/ZFTool")
    indent: str = Field(default="    ")


class ToolConfig(BaseModel):
    """Global zfscaffold configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the command layer, which hands the relevant sections to the
    generators and the skeleton bootstrap.
    """

    skeleton: SkeletonConfig = Field(default_factory=SkeletonConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def render_policy(self, no_docblocks: bool = False) -> RenderPolicy:
        """Build the formatting policy threaded through the synthesizer."""
        return RenderPolicy(
            doc_blocks=not no_docblocks,
            short_arrays=self.generator.short_arrays,
            indent=self.generator.indent,
            see_url=self.generator.see_url,
        )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ToolConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ToolConfig":
        """Build a ``ToolConfig`` from environment variables.

        Recognised variables (all optional):
            ZFS_SKELETON_REPOSITORY, ZFS_SKELETON_BRANCH, ZFS_CACHE_DIR,
            ZFS_CONNECT_TIMEOUT, ZFS_READ_TIMEOUT, ZFS_SHORT_ARRAYS.
        """
        skeleton_kwargs: dict[str, Any] = {}
        if os.environ.get("ZFS_SKELETON_REPOSITORY"):
            skeleton_kwargs["repository"] = os.environ["ZFS_SKELETON_REPOSITORY"]
        if os.environ.get("ZFS_SKELETON_BRANCH"):
            skeleton_kwargs["branch"] = os.environ["ZFS_SKELETON_BRANCH"]
        if os.environ.get("ZFS_CACHE_DIR"):
            skeleton_kwargs["cache_dir"] = Path(os.environ["ZFS_CACHE_DIR"])
        if os.environ.get("ZFS_CONNECT_TIMEOUT"):
            skeleton_kwargs["connect_timeout"] = float(os.environ["ZFS_CONNECT_TIMEOUT"])
        if os.environ.get("ZFS_READ_TIMEOUT"):
            skeleton_kwargs["read_timeout"] = float(os.environ["ZFS_READ_TIMEOUT"])

        generator_kwargs: dict[str, Any] = {}
        short_arrays = os.environ.get("ZFS_SHORT_ARRAYS", "").strip().lower()
        if short_arrays:
            generator_kwargs["short_arrays"] = short_arrays in ("1", "true", "yes", "on")

        return cls(
            skeleton=SkeletonConfig(**skeleton_kwargs),
            generator=GeneratorConfig(**generator_kwargs),
        )
