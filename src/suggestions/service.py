"""Teammate suggestion orchestrator.

Combines the record store, repository metadata, batch credibility and the
ranking engine to produce the top suggestions for a project:

1. Load the project.
2. Collect candidates: everyone except the owner, current members and
   users with a pending or accepted invite.
3. Enrich candidates concurrently with credibility and repository metadata.
4. Rank and keep the top results, attaching profile data.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import ConfigDict

from src.credibility.service import CredibilityService
from src.github.provider import RepositoryMetadataProvider, fetch_or_empty
from src.matching.models import MatchCandidate, MatchingEngineInput, MatchResult
from src.matching.teammate_engine import extract_keywords, rank_candidates
from src.models import InviteStatus
from src.store.models import Profile
from src.store.records import RecordStore

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 20
BLOCKING_INVITE_STATUSES = (InviteStatus.PENDING, InviteStatus.ACCEPTED)


class ProjectNotFoundError(Exception):
    """Raised when a project does not exist."""

    pass


class SuggestedTeammate(MatchResult):
    """A ranked candidate together with their profile."""

    model_config = ConfigDict(frozen=True)

    profile: Profile


class TeammateSuggestionService:
    """Ranks eligible users as teammates for a project."""

    def __init__(
        self,
        store: RecordStore,
        credibility: CredibilityService,
        repo_provider: RepositoryMetadataProvider | None = None,
        max_suggestions: int = MAX_SUGGESTIONS,
    ) -> None:
        self._store = store
        self._credibility = credibility
        self._repo_provider = repo_provider
        self._max_suggestions = max_suggestions

    async def get_suggested_teammates(self, project_id: str) -> list[SuggestedTeammate]:
        """Return at most ``max_suggestions`` ranked suggestions.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """
        project = self._store.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project '{project_id}' not found")

        excluded = {project.owner_id}
        excluded.update(m.user_id for m in self._store.members_of_projects([project_id]))
        excluded.update(
            i.receiver_id
            for i in self._store.invites_for_project(project_id, BLOCKING_INVITE_STATUSES)
        )
        profiles = self._store.list_profiles(exclude_ids=excluded)
        logger.info(
            "Ranking %d candidates for project %s (%d excluded)",
            len(profiles), project_id, len(excluded),
        )

        candidates = await self._enrich(profiles)
        engine_input = MatchingEngineInput(
            target_id=project.id,
            required_skills=project.required_skills,
            description=project.description,
            keywords=extract_keywords(f"{project.title} {project.description}"),
        )
        ranked = rank_candidates(candidates, engine_input)

        by_id = {p.id: p for p in profiles}
        return [
            SuggestedTeammate(**result.model_dump(), profile=by_id[result.user_id])
            for result in ranked[: self._max_suggestions]
            if result.user_id in by_id
        ]

    async def _enrich(self, profiles: list[Profile]) -> list[MatchCandidate]:
        """Fetch credibility and repository metadata for every profile concurrently."""
        credibility_task = self._credibility.get_batch_credibility_summaries(
            [p.id for p in profiles],
        )
        metadata_tasks = [
            fetch_or_empty(self._repo_provider, p.github_username) for p in profiles
        ]
        credibility, *metadata = await asyncio.gather(credibility_task, *metadata_tasks)

        return [
            MatchCandidate(
                id=profile.id,
                skills=profile.skills,
                github_username=profile.github_username,
                repo_languages=meta.languages,
                repo_topics=meta.topics,
                repo_names=meta.repo_names,
                credibility=credibility.get(profile.id),
            )
            for profile, meta in zip(profiles, metadata)
        ]
