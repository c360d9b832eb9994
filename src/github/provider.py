"""Repository metadata provider.

Turns a code-hosting handle into the language-frequency map, topic set and
repository names used by skill evidence and candidate ranking. The GitHub
implementation keeps a bounded per-handle TTL cache in process memory and
shares one in-flight request per handle.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections import Counter
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class RepositoryFetchError(Exception):
    """Raised when repository metadata cannot be fetched or parsed."""

    pass


class RepositoryMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    languages: dict[str, int] = Field(default_factory=dict)
    topics: list[str] = Field(default_factory=list)
    repo_names: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> RepositoryMetadata:
        return cls()


class RepositoryMetadataProvider(Protocol):
    async def fetch(self, handle: str) -> RepositoryMetadata: ...


def summarize_repos(repos: list[dict[str, Any]]) -> RepositoryMetadata:
    """Aggregate raw repository payloads into metadata."""
    languages: Counter[str] = Counter()
    topics: list[str] = []
    names: list[str] = []
    seen_topics: set[str] = set()

    for repo in repos:
        if not isinstance(repo, dict):
            continue
        name = repo.get("name")
        if name:
            names.append(str(name))
        language = repo.get("language")
        if language:
            languages[str(language)] += 1
        for topic in repo.get("topics") or []:
            key = str(topic).lower()
            if key not in seen_topics:
                seen_topics.add(key)
                topics.append(key)

    return RepositoryMetadata(
        languages=dict(languages.most_common()),
        topics=topics,
        repo_names=names,
    )


class GitHubMetadataProvider:
    """Fetches public repository metadata from the GitHub REST API."""

    DEFAULT_CACHE_TTL_SECONDS = 86_400  # 24 hours
    DEFAULT_TIMEOUT_SECONDS = 20.0
    DEFAULT_MAX_CACHE_ENTRIES = 1024
    PER_PAGE = 30

    def __init__(
        self,
        token: str | None = None,
        base_url: str = GITHUB_API_URL,
        timeout: float | None = None,
        cache_ttl_seconds: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_cache_entries: int | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout or self.DEFAULT_TIMEOUT_SECONDS
        self._cache_ttl = cache_ttl_seconds or self.DEFAULT_CACHE_TTL_SECONDS
        self._max_cache_entries = max_cache_entries or self.DEFAULT_MAX_CACHE_ENTRIES
        self._transport = transport
        # Entries are kept in write order, oldest first
        self._cache: dict[str, tuple[float, RepositoryMetadata]] = {}
        self._inflight: dict[str, asyncio.Task[RepositoryMetadata]] = {}

    @classmethod
    def from_env(cls) -> GitHubMetadataProvider:
        """Create a provider configured from environment variables."""
        return cls(
            token=os.environ.get("GITHUB_TOKEN") or None,
            timeout=float(
                os.environ.get("GITHUB_TIMEOUT_SECONDS", str(cls.DEFAULT_TIMEOUT_SECONDS))
            ),
            cache_ttl_seconds=int(
                os.environ.get("GITHUB_CACHE_TTL_SECONDS", str(cls.DEFAULT_CACHE_TTL_SECONDS))
            ),
        )

    async def fetch(self, handle: str) -> RepositoryMetadata:
        """Return metadata for ``handle``, from the cache when still fresh.

        Concurrent calls for the same handle share a single request.

        Raises:
            RepositoryFetchError: If the request fails or the payload is malformed.
        """
        key = handle.strip().lower()
        cached = self._cache.get(key)
        if cached is not None and time.time() - cached[0] < self._cache_ttl:
            return cached[1]

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._load(key, handle.strip()))
            self._inflight[key] = task
        # the shared request outlives any single cancelled caller
        return await asyncio.shield(task)

    async def _load(self, key: str, handle: str) -> RepositoryMetadata:
        try:
            repos = await self._get_repos(handle)
            metadata = summarize_repos(repos)
            self._remember(key, metadata)
            return metadata
        finally:
            self._inflight.pop(key, None)

    def _remember(self, key: str, metadata: RepositoryMetadata) -> None:
        now = time.time()
        # Prune handles whose entries have expired
        cutoff = now - self._cache_ttl
        self._cache = {k: v for k, v in self._cache.items() if v[0] > cutoff and k != key}
        while len(self._cache) >= self._max_cache_entries:
            self._cache.pop(next(iter(self._cache)))
        self._cache[key] = (now, metadata)

    async def _get_repos(self, handle: str) -> list[dict[str, Any]]:
        url = f"{self._base_url}/users/{handle}/repos"
        params = {"sort": "updated", "per_page": str(self.PER_PAGE)}
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(
                    url, params=params, headers=headers, timeout=self._timeout,
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RepositoryFetchError(f"Failed to fetch repositories for {handle}") from exc

        if not isinstance(data, list):
            raise RepositoryFetchError(f"Unexpected repository payload for {handle}")
        return data


async def fetch_or_empty(
    provider: RepositoryMetadataProvider | None, handle: str | None,
) -> RepositoryMetadata:
    """Fetch metadata for ``handle``, treating any provider failure as no data."""
    if provider is None or not handle:
        return RepositoryMetadata.empty()
    try:
        return await provider.fetch(handle)
    except Exception as exc:  # provider outages degrade to empty metadata
        logger.warning("Repository metadata unavailable for %s: %s", handle, exc)
        return RepositoryMetadata.empty()
