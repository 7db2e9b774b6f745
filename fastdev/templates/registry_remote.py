"""Async client for the remote template registry.

The registry is a single JSON document (``{"version": ..., "templates": [...]}``)
served from any static URL. Responses are cached on disk for a short TTL;
when the network or the payload is bad, a stale cache is still preferred
over nothing. The cache is an optimisation only: concurrent CLI runs may
overwrite each other's cache write without harm.

Typical usage::

    registry = RemoteRegistry()
    template = await registry.get_template_by_slug("nextjs-blog")
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config import get_config_dir
from ..models import RegistryTemplate, Template, TemplateRegistry
from .registry import search_templates

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = (
    "https://raw.githubusercontent.com/fastdotdev/create-fast-dev/main/registry.json"
)
CACHE_FILE = "registry-cache.json"
CACHE_TTL_SECONDS = 15 * 60


class RegistryFormatError(ValueError):
    """Raised internally when a fetched payload is not a valid registry."""


def registry_template_to_template(entry: RegistryTemplate) -> Template:
    """Catalog entry -> descriptor; prompts/transforms come from the download."""
    return Template(
        id=entry.id,
        slug=entry.id,
        name=entry.name,
        description=entry.description,
        stack_id=entry.stack,
        git_url=entry.git_url,
        branch=entry.branch,
        prompts=[],
        transforms=[],
        tags=list(entry.tags),
    )


class RemoteRegistry:
    """Fetches and caches the remote template registry.

    The client uses ``httpx.AsyncClient`` for non-blocking HTTP; cache reads
    and writes run in a worker thread.
    """

    def __init__(
        self,
        url: str = DEFAULT_REGISTRY_URL,
        cache_path: str | Path | None = None,
        ttl: float = CACHE_TTL_SECONDS,
        timeout: float = 10.0,
    ) -> None:
        self.url = url
        self.cache_path = Path(cache_path) if cache_path else get_config_dir() / CACHE_FILE
        self.ttl = ttl
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------

    def _is_cache_fresh(self) -> bool:
        try:
            age = time.time() - self.cache_path.stat().st_mtime
        except OSError:
            return False
        return age < self.ttl

    def _read_cache(self) -> Optional[TemplateRegistry]:
        try:
            cached = json.loads(self.cache_path.read_text(encoding="utf-8"))
            return TemplateRegistry.model_validate(cached["registry"])
        except (OSError, ValueError, KeyError, TypeError, ValidationError):
            return None

    def _write_cache(self, registry: TemplateRegistry) -> None:
        payload = {
            "fetchedAt": int(time.time() * 1000),
            "registry": registry.to_json_dict(),
        }
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.debug("Registry cache write failed: %s", exc)

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    async def _download(self) -> TemplateRegistry:
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), follow_redirects=True) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            data = response.json()

        if (
            not isinstance(data, dict)
            or not data.get("version")
            or not isinstance(data.get("templates"), list)
        ):
            raise RegistryFormatError("Invalid registry format")
        try:
            return TemplateRegistry.model_validate(data)
        except ValidationError as exc:
            raise RegistryFormatError(f"Invalid registry entry: {exc}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch(self, refresh: bool = False) -> Optional[TemplateRegistry]:
        """Return the registry from a fresh cache, the network, or a stale cache.

        Args:
            refresh: Skip the fresh-cache shortcut and always hit the network.

        Returns:
            The registry, or ``None`` when the fetch fails and no cache exists.
        """
        if not refresh and await asyncio.to_thread(self._is_cache_fresh):
            cached = await asyncio.to_thread(self._read_cache)
            if cached is not None:
                return cached

        try:
            registry = await self._download()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Registry fetch from %s failed: %s", self.url, exc)
            return await asyncio.to_thread(self._read_cache)

        await asyncio.to_thread(self._write_cache, registry)
        return registry

    async def get_templates(self, refresh: bool = False) -> list[Template]:
        registry = await self.fetch(refresh=refresh)
        if registry is None:
            return []
        return [registry_template_to_template(entry) for entry in registry.templates]

    async def get_template_by_slug(self, slug: str, refresh: bool = False) -> Optional[Template]:
        registry = await self.fetch(refresh=refresh)
        if registry is None:
            return None
        entry = next((t for t in registry.templates if t.id == slug), None)
        return registry_template_to_template(entry) if entry else None

    async def search(self, query: str, refresh: bool = False) -> list[Template]:
        return search_templates(await self.get_templates(refresh=refresh), query)

    async def clear_cache(self) -> None:
        await asyncio.to_thread(self.cache_path.unlink, missing_ok=True)
