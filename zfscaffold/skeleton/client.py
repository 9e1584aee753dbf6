"""HTTP client for the remote skeleton application.

Wraps the two remote calls the bootstrap needs -- "what is the latest
revision?" and "download the archive of revision X" -- with bounded
connect/read timeouts and maps transport failures onto the engine's error
taxonomy.

Typical usage::

    client = SkeletonClient(SkeletonConfig())
    revision = client.latest_revision()
    client.download_archive(revision, Path("/tmp/ZF2_Skeleton_<sha>.zip"))
"""

from __future__ import annotations

import re
import zipfile
from pathlib import Path
from typing import Any

import httpx

from zfscaffold.config import SkeletonConfig
from zfscaffold.errors import ArchiveError, NetworkError

_REVISION = re.compile(r"^[A-Za-z0-9._-]+$")


class SkeletonClient:
    """Synchronous client for the template repository.

    A custom ``transport`` can be injected (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: SkeletonConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.Client:
        """Return a fresh ``Client`` configured with our timeouts."""
        return httpx.Client(
            timeout=httpx.Timeout(self.config.read_timeout, connect=self.config.connect_timeout),
            follow_redirects=True,
            headers={"User-Agent": "zfscaffold", "Accept": "application/vnd.github+json"},
            transport=self.transport,
        )

    @staticmethod
    def _extract_revision(data: Any) -> str | None:
        """Pull the commit hash out of a commits API response.

        ``/commits?per_page=1`` returns a list, ``/commits/<ref>`` a single
        object; both carry the hash in ``"sha"``.
        """
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, dict):
            sha = data.get("sha")
            if isinstance(sha, str):
                return sha
        return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def latest_revision(self) -> str:
        """Return the identifier of the newest template revision.

        Raises:
            NetworkError: On connection failure, timeout, an HTTP error
                status or an unusable response body.
        """
        url = self.config.latest_revision_url
        try:
            with self._client() as client:
                response = client.get(url)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to {url} timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"{url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Cannot connect to {url}: {exc}") from exc
        except ValueError as exc:
            raise NetworkError(f"{url} did not return JSON: {exc}") from exc

        revision = self._extract_revision(data)
        if not revision or not _REVISION.match(revision):
            raise NetworkError(f"{url} did not return a usable revision identifier")
        return revision

    def download_archive(self, revision: str, destination: Path) -> Path:
        """Download the archive of *revision* to *destination*.

        The body is streamed into a ``.part`` file that is only renamed to
        *destination* once it is complete and is a valid zip archive.

        Raises:
            ArchiveError: On any transport failure (including timeouts), an
                HTTP error status, a write failure or an invalid archive.
        """
        url = self.config.archive_url_for(revision)
        partial = destination.with_name(destination.name + ".part")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with self._client() as client, client.stream("GET", url) as response:
                response.raise_for_status()
                with partial.open("wb") as handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
            if not zipfile.is_zipfile(partial):
                raise ArchiveError(f"The download from {url} is not a zip archive")
            partial.replace(destination)
        except httpx.TimeoutException as exc:
            raise ArchiveError(f"Download of {url} timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise ArchiveError(
                f"Download of {url} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ArchiveError(f"Download of {url} failed: {exc}") from exc
        except OSError as exc:
            raise ArchiveError(f"Cannot store the archive in {destination}: {exc}") from exc
        finally:
            partial.unlink(missing_ok=True)
        return destination
