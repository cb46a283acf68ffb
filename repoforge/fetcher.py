"""Workspace fetcher -- obtains a clean copy of the template tree.

Two retrieval strategies share one contract: after :meth:`fetch` returns the
destination holds the template files and no version-control metadata, so the
template's own history never leaks into a generated project.

* :class:`GitFetcher` does a depth-1, single-branch ``git clone``.
* :class:`ArchiveFetcher` downloads the branch tarball over HTTPS, for
  machines without a git binary.

Neither strategy retries; retry policy belongs to the caller.
"""

from __future__ import annotations

import asyncio
import tarfile
import tempfile
from pathlib import Path

import httpx

from .config import GeneratorSettings
from .git import GitError, run_git
from .utils import is_populated_dir, remove_path


class FetchError(Exception):
    """Raised when the template cannot be retrieved into the destination."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class WorkspaceFetcher:
    """Base class: destination checks and VCS-metadata stripping."""

    def __init__(self, settings: GeneratorSettings | None = None) -> None:
        self.settings = settings or GeneratorSettings()

    async def fetch(self, destination: str | Path) -> None:
        """Retrieve the template into *destination*.

        Raises:
            FetchError: If the destination is already populated or retrieval
                fails for any reason.
        """
        dest = Path(destination)
        if dest.exists() and not dest.is_dir():
            raise FetchError(f"Destination {dest} exists and is not a directory")
        if is_populated_dir(dest):
            raise FetchError(f"Destination {dest} already exists and is not empty")

        await self._retrieve(dest)

        try:
            await asyncio.to_thread(remove_path, dest / ".git")
        except OSError as exc:
            raise FetchError(f"Could not strip template history from {dest}: {exc}", exc) from exc

    async def _retrieve(self, destination: Path) -> None:
        raise NotImplementedError


class GitFetcher(WorkspaceFetcher):
    """Shallow clone of a single branch of the template repository."""

    async def _retrieve(self, destination: Path) -> None:
        url = self.settings.template_url
        branch = self.settings.template_branch
        try:
            await run_git(
                "clone",
                "--depth", "1",
                "--single-branch",
                "--branch", branch,
                url,
                str(destination),
                timeout=self.settings.git_timeout,
            )
        except GitError as exc:
            raise FetchError(
                f"Could not clone {url} (branch {branch}): {exc.stderr or exc}", exc
            ) from exc


class ArchiveFetcher(WorkspaceFetcher):
    """Download and unpack the template branch tarball."""

    def __init__(
        self,
        settings: GeneratorSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(settings)
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.git_timeout, connect=10.0),
            follow_redirects=True,
            transport=self.transport,
        )

    async def _retrieve(self, destination: Path) -> None:
        url = self.settings.resolved_archive_url
        with tempfile.TemporaryDirectory(prefix="repoforge-") as tmp:
            archive = Path(tmp) / "template.tar.gz"
            try:
                async with self._client() as client:
                    async with client.stream("GET", url) as response:
                        response.raise_for_status()
                        with archive.open("wb") as fh:
                            async for chunk in response.aiter_bytes():
                                fh.write(chunk)
            except httpx.HTTPStatusError as exc:
                raise FetchError(
                    f"Template archive {url} returned HTTP {exc.response.status_code}", exc
                ) from exc
            except httpx.HTTPError as exc:
                raise FetchError(f"Could not download template archive {url}: {exc}", exc) from exc

            try:
                await asyncio.to_thread(_extract_archive, archive, destination)
            except (tarfile.TarError, OSError) as exc:
                raise FetchError(f"Could not unpack template archive {url}: {exc}", exc) from exc


def make_fetcher(settings: GeneratorSettings) -> WorkspaceFetcher:
    """Return the fetcher matching ``settings.fetch_strategy``."""
    if settings.fetch_strategy == "archive":
        return ArchiveFetcher(settings)
    return GitFetcher(settings)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _strip_top_level(name: str) -> str | None:
    parts = Path(name).parts
    if len(parts) <= 1:
        return None
    return str(Path(*parts[1:]))


def _extract_archive(archive: Path, destination: Path) -> None:
    """Unpack *archive* into *destination*, dropping the leading directory.

    Forge tarballs wrap everything in ``<repo>-<branch>/``; that component is
    removed so the template root lands directly in *destination*.
    """
    destination.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive, mode="r:*") as tar:
        members: list[tarfile.TarInfo] = []
        for member in tar.getmembers():
            stripped = _strip_top_level(member.name)
            if stripped is None:
                continue
            member.name = stripped
            if member.islnk():
                linkname = _strip_top_level(member.linkname)
                if linkname is None:
                    continue
                member.linkname = linkname
            members.append(member)
        tar.extractall(destination, members=members, filter="data")
