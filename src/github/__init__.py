"""Repository metadata provider."""

from src.github.provider import (
    GitHubMetadataProvider,
    RepositoryFetchError,
    RepositoryMetadata,
    RepositoryMetadataProvider,
    fetch_or_empty,
    summarize_repos,
)

__all__ = [
    "GitHubMetadataProvider",
    "RepositoryFetchError",
    "RepositoryMetadata",
    "RepositoryMetadataProvider",
    "fetch_or_empty",
    "summarize_repos",
]
