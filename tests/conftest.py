"""Shared pytest fixtures for the zfscaffold test suite.

Provides reusable fixtures for:
- A minimal ZF2 application tree on disk
- Resolved names for the usual Blog / Index / show scenario
- Skeleton archives and an archive cache directory
- A mocked HTTP transport for the skeleton repository
"""

from __future__ import annotations

import io
import json
import textwrap
import zipfile
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from zfscaffold.codegen.models import RenderPolicy
from zfscaffold.config import SkeletonConfig
from zfscaffold.naming.resolver import ResolvedNames, ScaffoldRequest, resolve

APPLICATION_CONFIG = textwrap.dedent(
    """\
    <?php
    return array(
        'modules' => array(
            'Application',
        ),
        'module_listener_options' => array(
            'module_paths' => array(
                './module',
                './vendor',
            ),
            'config_glob_paths' => array(
                'config/autoload/{,*.}{global,local}.php',
            ),
        ),
    );
    """
)

SKELETON_FILES = {
    "composer.json": '{"name": "zendframework/skeleton-application"}\n',
    "public/index.php": "<?php\nchdir(dirname(__DIR__));\n",
    "config/application.config.php": APPLICATION_CONFIG,
    "module/Application/Module.php": "<?php\nnamespace Application;\n\nclass Module\n{\n}\n",
}


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@pytest.fixture
def zf2_project(tmp_path: Path) -> Path:
    """A minimal ZF2 application: ``module/`` and ``config/application.config.php``."""
    project = tmp_path / "app"
    (project / "module" / "Application").mkdir(parents=True)
    (project / "config").mkdir()
    (project / "config" / "application.config.php").write_text(
        APPLICATION_CONFIG, encoding="utf-8"
    )
    yield project


@pytest.fixture
def blog_names(zf2_project: Path) -> ResolvedNames:
    """Names for ``create action show Index Blog`` inside :func:`zf2_project`."""
    return resolve(
        ScaffoldRequest(
            path=str(zf2_project),
            module_name="Blog",
            controller_name="Index",
            action_name="show",
        )
    )


@pytest.fixture
def policy() -> RenderPolicy:
    return RenderPolicy()


@pytest.fixture
def bare_policy() -> RenderPolicy:
    """Policy with doc blocks disabled (``--no-docblocks``)."""
    return RenderPolicy(doc_blocks=False)


# ---------------------------------------------------------------------------
# Skeleton archives
# ---------------------------------------------------------------------------


def build_zip(files: dict[str, str], root: str | None = "ZendSkeletonApplication-master") -> bytes:
    """Return the bytes of a zip archive holding *files* under *root*/."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as bundle:
        if root:
            bundle.writestr(f"{root}/", "")
        for name, content in files.items():
            bundle.writestr(f"{root}/{name}" if root else name, content)
    return buffer.getvalue()


@pytest.fixture
def skeleton_zip() -> bytes:
    return build_zip(SKELETON_FILES)


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "cache"
    directory.mkdir()
    yield directory


@pytest.fixture
def skeleton_config(cache_dir: Path) -> SkeletonConfig:
    return SkeletonConfig(cache_dir=cache_dir)


@pytest.fixture
def make_cached_archive(cache_dir: Path, skeleton_zip: bytes) -> Callable[[str], Path]:
    """Factory writing ``ZF2_Skeleton_<revision>.zip`` into the cache."""

    def _make(revision: str, content: bytes | None = None) -> Path:
        path = cache_dir / f"ZF2_Skeleton_{revision}.zip"
        path.write_bytes(skeleton_zip if content is None else content)
        return path

    return _make


@pytest.fixture
def github_transport(skeleton_zip: bytes) -> Callable[..., httpx.MockTransport]:
    """Factory for a transport serving the commits API and the archive download."""

    def _make(
        revision: str = "0123abcd",
        archive: bytes | None = None,
        commits_status: int = 200,
        archive_status: int = 200,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.github.com":
                return httpx.Response(
                    commits_status, content=json.dumps([{"sha": revision}]).encode()
                )
            if request.url.path.endswith(f"/archive/{revision}.zip"):
                return httpx.Response(
                    archive_status, content=skeleton_zip if archive is None else archive
                )
            return httpx.Response(404)

        return httpx.MockTransport(handler)

    return _make


@pytest.fixture
def skeleton_files() -> dict[str, str]:
    """Files (relative to the archive root) of :func:`skeleton_zip`."""
    return dict(SKELETON_FILES)


@pytest.fixture
def zip_builder() -> Callable[..., bytes]:
    return build_zip
