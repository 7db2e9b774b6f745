"""Template download.

Resolves a source location such as ``github:org/repo/sub/dir#branch`` to a
tarball, downloads it with httpx and unpacks it into the target directory.
The archive's top-level folder is stripped, and an optional subdirectory
selects part of the repository.
"""

from __future__ import annotations

import asyncio
import io
import logging
import shutil
import tarfile
from pathlib import Path, PurePosixPath
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from ..config import DEFAULT_BRANCH
from ..errors import TemplateFetchError
from ..models import Template

logger = logging.getLogger(__name__)

GITHUB_TARBALL_URL = "https://codeload.github.com/{owner}/{repo}/tar.gz/{ref}"

_VALID_PREFIXES = ("github:",)


class FetchResult(BaseModel):
    """Where a template was extracted and which source it came from."""

    dir: Path = Field(..., description="Directory the template was extracted into")
    source: str = Field(..., description="Resolved source, e.g. 'github:org/repo#main'")


class TemplateSource(BaseModel):
    provider: str
    owner: str
    repo: str
    subdir: str = ""
    ref: str = DEFAULT_BRANCH

    @property
    def tarball_url(self) -> str:
        return GITHUB_TARBALL_URL.format(owner=self.owner, repo=self.repo, ref=self.ref)

    def __str__(self) -> str:
        path = "/".join(p for p in (self.owner, self.repo, self.subdir) if p)
        return f"{self.provider}:{path}#{self.ref}"


def validate_template_url(git_url: str) -> bool:
    """Return ``True`` if *git_url* uses a provider this fetcher can download."""
    return git_url.startswith(_VALID_PREFIXES)


def parse_source(git_url: str, branch: Optional[str] = None) -> TemplateSource:
    """Split ``github:owner/repo[/subdir][#ref]`` into its parts.

    An explicit *branch* wins over a ``#ref`` suffix; with neither the
    default branch is used.

    Raises:
        TemplateFetchError: For unsupported providers or malformed paths.
    """
    if not validate_template_url(git_url):
        raise TemplateFetchError(f"Unsupported template source: {git_url}", source=git_url)

    provider, _, rest = git_url.partition(":")
    rest, _, ref = rest.partition("#")
    parts = [p for p in rest.strip("/").split("/") if p]
    if len(parts) < 2:
        raise TemplateFetchError(
            f"Template source must look like '{provider}:owner/repo': {git_url}",
            source=git_url,
        )

    return TemplateSource(
        provider=provider,
        owner=parts[0],
        repo=parts[1],
        subdir="/".join(parts[2:]),
        ref=branch or ref or DEFAULT_BRANCH,
    )


async def fetch_template(
    template: Template,
    dir: str | Path,
    force: bool = False,
    timeout: float = 60.0,
) -> FetchResult:
    """Download *template* into *dir*.

    Args:
        template: Descriptor whose ``git_url``/``branch`` locate the source.
        dir: Target directory; created if missing.
        force: Allow extracting into a non-empty directory.
        timeout: HTTP timeout in seconds.

    Returns:
        ``FetchResult`` with the target directory and the resolved source.

    Raises:
        TemplateFetchError: On any network, archive or filesystem failure.
    """
    target = Path(dir).resolve()
    source = parse_source(template.git_url, template.branch)

    if target.exists() and any(target.iterdir()) and not force:
        raise TemplateFetchError(f"Destination {target} already exists and is not empty", str(source))

    logger.debug("Downloading %s", source.tarball_url)
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0), follow_redirects=True
        ) as client:
            response = await client.get(source.tarball_url)
            response.raise_for_status()
            archive = response.content
    except httpx.HTTPStatusError as exc:
        raise TemplateFetchError(
            f"Failed to download template {source}: HTTP {exc.response.status_code}",
            str(source),
        ) from exc
    except httpx.HTTPError as exc:
        raise TemplateFetchError(f"Failed to download template {source}: {exc}", str(source)) from exc

    created = not target.exists()
    try:
        count = await asyncio.to_thread(_extract, archive, target, source.subdir)
    except (tarfile.TarError, OSError, ValueError) as exc:
        if created:
            shutil.rmtree(target, ignore_errors=True)
        raise TemplateFetchError(f"Failed to extract template {source}: {exc}", str(source)) from exc

    if count == 0:
        if created:
            shutil.rmtree(target, ignore_errors=True)
        where = f" (subdirectory '{source.subdir}')" if source.subdir else ""
        raise TemplateFetchError(f"Template {source} is empty{where}", str(source))

    return FetchResult(dir=target, source=str(source))


def _extract(archive: bytes, target: Path, subdir: str) -> int:
    """Unpack *archive* into *target*, returning the number of files written."""
    prefix = PurePosixPath(subdir) if subdir else None
    written = 0
    target.mkdir(parents=True, exist_ok=True)

    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:gz") as tar:
        for member in tar.getmembers():
            parts = PurePosixPath(member.name).parts[1:]  # drop "<repo>-<ref>/"
            if not parts:
                continue
            relative = PurePosixPath(*parts)
            if prefix is not None:
                if relative == prefix or prefix not in relative.parents:
                    continue
                relative = relative.relative_to(prefix)

            if relative.is_absolute() or ".." in relative.parts:
                raise ValueError(f"Unsafe path in archive: {member.name}")

            destination = target.joinpath(*relative.parts)
            if member.isdir():
                destination.mkdir(parents=True, exist_ok=True)
            elif member.isfile():
                extracted = tar.extractfile(member)
                if extracted is None:
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(extracted.read())
                if member.mode & 0o111:
                    destination.chmod(0o755)
                written += 1
            else:
                logger.debug("Skipping non-regular archive member %s", member.name)

    return written
