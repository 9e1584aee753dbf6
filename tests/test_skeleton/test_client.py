"""Unit tests for SkeletonClient (zfscaffold.skeleton.client).

Tests cover:
- latest_revision (list and object payloads, HTTP error, connect error,
  timeout, bad JSON, unusable revision)
- download_archive (success, HTTP error, timeout, invalid archive)
"""

from __future__ import annotations

import httpx
import pytest

from zfscaffold.errors import ArchiveError, NetworkError
from zfscaffold.skeleton.client import SkeletonClient

pytestmark = pytest.mark.unit


def _client(config, handler) -> SkeletonClient:
    return SkeletonClient(config, transport=httpx.MockTransport(handler))


def _raise(exc_type):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)

    return handler


class TestLatestRevision:
    def test_list_payload(self, skeleton_config):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"sha": "a1b2c3"}])

        assert _client(skeleton_config, handler).latest_revision() == "a1b2c3"
        assert seen[0].url.path == "/repos/zendframework/ZendSkeletonApplication/commits"
        assert seen[0].url.params["sha"] == "master"

    def test_object_payload(self, skeleton_config):
        client = _client(skeleton_config, lambda request: httpx.Response(200, json={"sha": "ff00"}))
        assert client.latest_revision() == "ff00"

    def test_http_error(self, skeleton_config):
        client = _client(skeleton_config, lambda request: httpx.Response(503))
        with pytest.raises(NetworkError, match="HTTP 503"):
            client.latest_revision()

    def test_connect_error(self, skeleton_config):
        with pytest.raises(NetworkError, match="Cannot connect"):
            _client(skeleton_config, _raise(httpx.ConnectError)).latest_revision()

    def test_timeout(self, skeleton_config):
        with pytest.raises(NetworkError, match="timed out"):
            _client(skeleton_config, _raise(httpx.ConnectTimeout)).latest_revision()

    def test_not_json(self, skeleton_config):
        client = _client(skeleton_config, lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(NetworkError, match="did not return JSON"):
            client.latest_revision()

    @pytest.mark.parametrize("payload", [[], [{}], [{"sha": "../../etc"}], {"sha": 42}])
    def test_unusable_revision(self, skeleton_config, payload):
        client = _client(skeleton_config, lambda request: httpx.Response(200, json=payload))
        with pytest.raises(NetworkError, match="usable revision"):
            client.latest_revision()


class TestDownloadArchive:
    def test_success(self, skeleton_config, skeleton_zip, cache_dir):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=skeleton_zip)

        destination = cache_dir / "ZF2_Skeleton_a1b2.zip"
        assert _client(skeleton_config, handler).download_archive("a1b2", destination) == destination
        assert destination.read_bytes() == skeleton_zip
        assert str(seen[0].url) == (
            "https://github.com/zendframework/ZendSkeletonApplication/archive/a1b2.zip"
        )
        assert list(cache_dir.iterdir()) == [destination]

    def test_http_error(self, skeleton_config, cache_dir):
        destination = cache_dir / "ZF2_Skeleton_a1b2.zip"
        client = _client(skeleton_config, lambda request: httpx.Response(404))
        with pytest.raises(ArchiveError, match="HTTP 404"):
            client.download_archive("a1b2", destination)
        assert list(cache_dir.iterdir()) == []

    def test_timeout_is_fatal(self, skeleton_config, cache_dir):
        with pytest.raises(ArchiveError, match="timed out"):
            _client(skeleton_config, _raise(httpx.ReadTimeout)).download_archive(
                "a1b2", cache_dir / "ZF2_Skeleton_a1b2.zip"
            )

    def test_invalid_archive_is_discarded(self, skeleton_config, cache_dir):
        client = _client(skeleton_config, lambda request: httpx.Response(200, content=b"not a zip"))
        with pytest.raises(ArchiveError, match="not a zip archive"):
            client.download_archive("a1b2", cache_dir / "ZF2_Skeleton_a1b2.zip")
        assert list(cache_dir.iterdir()) == []
