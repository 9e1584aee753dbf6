"""Unit tests for ToolConfig and related Pydantic models (zfscaffold.config).

Tests cover:
- SkeletonConfig defaults and URL templates
- GeneratorConfig defaults
- ToolConfig.render_policy, save/load, from_env
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from zfscaffold.config import GeneratorConfig, SkeletonConfig, ToolConfig


# ---------------------------------------------------------------------------
# SkeletonConfig
# ---------------------------------------------------------------------------


class TestSkeletonConfig:
    @pytest.mark.unit
    def test_defaults(self):
        config = SkeletonConfig()
        assert config.repository == "zendframework/ZendSkeletonApplication"
        assert config.branch == "master"
        assert config.cache_prefix == "ZF2_Skeleton_"
        assert config.connect_timeout == 5.0
        assert config.read_timeout == 30.0

    @pytest.mark.unit
    def test_latest_revision_url(self):
        config = SkeletonConfig(repository="acme/skeleton", branch="develop")
        assert config.latest_revision_url == (
            "https://api.github.com/repos/acme/skeleton/commits?sha=develop&per_page=1"
        )

    @pytest.mark.unit
    def test_archive_url_for(self):
        assert SkeletonConfig().archive_url_for("abc") == (
            "https://github.com/zendframework/ZendSkeletonApplication/archive/abc.zip"
        )

    @pytest.mark.unit
    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValidationError):
            SkeletonConfig(connect_timeout=0)


# ---------------------------------------------------------------------------
# GeneratorConfig
# ---------------------------------------------------------------------------


class TestGeneratorConfig:
    @pytest.mark.unit
    def test_defaults(self):
        config = GeneratorConfig()
        assert config.source_extension == ".php"
        assert config.view_extension == ".phtml"
        assert config.backup_suffix == ".old"
        assert config.short_arrays is False


# ---------------------------------------------------------------------------
# ToolConfig
# ---------------------------------------------------------------------------


class TestToolConfig:
    @pytest.mark.unit
    def test_render_policy(self):
        config = ToolConfig(generator=GeneratorConfig(short_arrays=True, indent="\t"))
        policy = config.render_policy()
        assert policy.doc_blocks is True
        assert policy.short_arrays is True
        assert policy.indent == "\t"
        assert config.render_policy(no_docblocks=True).doc_blocks is False

    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        config = ToolConfig(skeleton=SkeletonConfig(branch="develop", cache_dir=tmp_path))
        path = config.save(tmp_path / "nested" / "zfscaffold.json")
        assert path.exists()
        loaded = ToolConfig.load(path)
        assert loaded == config

    @pytest.mark.unit
    def test_from_env(self, tmp_path: Path):
        env = {
            "ZFS_SKELETON_REPOSITORY": "acme/skeleton",
            "ZFS_SKELETON_BRANCH": "develop",
            "ZFS_CACHE_DIR": str(tmp_path),
            "ZFS_CONNECT_TIMEOUT": "2.5",
            "ZFS_READ_TIMEOUT": "10",
            "ZFS_SHORT_ARRAYS": "yes",
        }
        with patch.dict(os.environ, env):
            config = ToolConfig.from_env()
        assert config.skeleton.repository == "acme/skeleton"
        assert config.skeleton.branch == "develop"
        assert config.skeleton.cache_dir == tmp_path
        assert config.skeleton.connect_timeout == 2.5
        assert config.skeleton.read_timeout == 10.0
        assert config.generator.short_arrays is True

    @pytest.mark.unit
    def test_from_env_defaults(self):
        keys = [k for k in os.environ if k.startswith("ZFS_")]
        with patch.dict(os.environ, {}, clear=False):
            for key in keys:
                del os.environ[key]
            config = ToolConfig.from_env()
        assert config == ToolConfig(skeleton=SkeletonConfig(cache_dir=config.skeleton.cache_dir))
        assert config.generator.short_arrays is False

    @pytest.mark.unit
    def test_from_env_short_arrays_off(self):
        with patch.dict(os.environ, {"ZFS_SHORT_ARRAYS": "0"}):
            assert ToolConfig.from_env().generator.short_arrays is False
