"""Tests for the teammate suggestion orchestrator."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.credibility.service import CredibilityService
from src.github.provider import (
    GitHubMetadataProvider,
    RepositoryFetchError,
    RepositoryMetadata,
)
from src.models import CredibilitySummary, InviteStatus
from src.store.models import Invite, Membership
from src.store.records import SQLiteRecordStore
from src.suggestions.service import (
    MAX_SUGGESTIONS,
    ProjectNotFoundError,
    SuggestedTeammate,
    TeammateSuggestionService,
)
from tests.conftest import make_profile, make_project


@pytest.fixture
def project_store(store: SQLiteRecordStore) -> SQLiteRecordStore:
    store.add_project(make_project(id="p1", owner_id="owner", required_skills=["python", "react"]))
    for uid in ("owner", "member", "inv-pending", "inv-accepted", "inv-rejected"):
        store.add_profile(make_profile(id=uid, skills=["python"]))
    store.add_profile(make_profile(id="free-1", skills=["python", "react"], github_username="pyreact"))
    store.add_profile(make_profile(id="free-2", skills=["go"]))
    store.add_membership(Membership(project_id="p1", user_id="member"))
    for uid, status in (
        ("inv-pending", InviteStatus.PENDING),
        ("inv-accepted", InviteStatus.ACCEPTED),
        ("inv-rejected", InviteStatus.REJECTED),
    ):
        store.add_invite(Invite(
            id=f"i-{uid}", project_id="p1", sender_id="owner", receiver_id=uid, status=status,
        ))
    return store


def _service(store, cache, provider=None) -> TeammateSuggestionService:
    return TeammateSuggestionService(store, CredibilityService(store, cache, provider), provider)


class TestGetSuggestedTeammates:
    """Tests for candidate filtering, enrichment and ranking."""

    @pytest.mark.asyncio
    async def test_excludes_owner_members_and_open_invites(self, project_store, cache) -> None:
        results = await _service(project_store, cache).get_suggested_teammates("p1")
        assert {r.user_id for r in results} == {"inv-rejected", "free-1", "free-2"}

    @pytest.mark.asyncio
    async def test_ranked_with_profile_and_credibility(self, project_store, cache) -> None:
        results = await _service(project_store, cache).get_suggested_teammates("p1")
        assert results[0].user_id == "free-1"
        assert results[0].profile.github_username == "pyreact"
        assert all(isinstance(r, SuggestedTeammate) for r in results)
        assert all(r.credibility is not None for r in results)
        assert all(r.details.credibility_score is not None for r in results)
        scores = [(r.score, r.confidence) for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_unknown_project(self, store, cache) -> None:
        with pytest.raises(ProjectNotFoundError):
            await _service(store, cache).get_suggested_teammates("ghost")

    @pytest.mark.asyncio
    async def test_results_capped(self, store, cache) -> None:
        store.add_project(make_project(id="big", owner_id="owner"))
        for i in range(MAX_SUGGESTIONS + 7):
            store.add_profile(make_profile(id=f"user-{i:02d}", skills=["python"]))
        results = await _service(store, cache).get_suggested_teammates("big")
        assert len(results) == MAX_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_repository_failures_isolated(self, project_store, cache) -> None:
        provider = AsyncMock()

        async def fetch(handle: str) -> RepositoryMetadata:
            raise RepositoryFetchError(f"{handle} unavailable")

        provider.fetch.side_effect = fetch
        results = await _service(project_store, cache, provider).get_suggested_teammates("p1")
        assert len(results) == 3
        assert all(r.details.repo_language_score == 0 for r in results)

    @pytest.mark.asyncio
    async def test_repository_metadata_used_for_ranking(self, project_store, cache) -> None:
        provider = AsyncMock()
        provider.fetch.return_value = RepositoryMetadata(
            languages={"Python": 4}, topics=["chess"], repo_names=["chess-engine"],
        )
        results = await _service(project_store, cache, provider).get_suggested_teammates("p1")
        top = next(r for r in results if r.user_id == "free-1")
        assert top.details.repo_language_score > 0
        # "chess" appears twice in the keywords, "engine" once
        assert top.details.repo_relevance_score == 60
        provider.fetch.assert_awaited_with("pyreact")

    @pytest.mark.asyncio
    async def test_each_handle_fetched_once(self, store, cache) -> None:
        store.add_project(make_project(id="p2", owner_id="owner"))
        handles = [f"dev{i}" for i in range(5)]
        for handle in handles:
            store.add_profile(make_profile(id=handle, skills=["python"], github_username=handle))
        requested: list[str] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            await asyncio.sleep(0.01)
            return httpx.Response(200, json=[{"name": "chess-bot", "language": "Python"}])

        provider = GitHubMetadataProvider(transport=httpx.MockTransport(handler))
        results = await _service(store, cache, provider).get_suggested_teammates("p2")

        assert sorted(requested) == [f"/users/{h}/repos" for h in handles]
        assert all(r.details.repo_language_score > 0 for r in results)

    @pytest.mark.asyncio
    async def test_missing_credibility_leaves_candidate_unweighted(self, project_store) -> None:
        credibility = MagicMock(spec=CredibilityService)
        credibility.get_batch_credibility_summaries = AsyncMock(return_value={
            "free-1": CredibilitySummary.neutral(),
        })
        service = TeammateSuggestionService(project_store, credibility)
        results = await service.get_suggested_teammates("p1")
        by_id = {r.user_id: r for r in results}
        assert by_id["free-1"].credibility == CredibilitySummary.neutral()
        assert by_id["free-2"].credibility is None
        assert by_id["free-2"].details.credibility_score is None
