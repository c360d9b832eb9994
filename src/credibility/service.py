"""Credibility data service.

This module provides the CredibilityService class for:
- Assembling a CredibilityInput from the record store and repository metadata
- Computing full breakdowns and writing them through to the cache
- Cache-first summary reads
- Concurrent, error-isolated batch summaries
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from src.credibility.cache import CredibilityCache
from src.credibility.engine import compute_credibility_score
from src.credibility.models import (
    ActivityRecord,
    ConsistencyInput,
    CredibilityInput,
    CredibilityScoreBreakdown,
    EndorsementRecord,
    ExecutionProofInput,
    ProjectRecord,
    ReliabilityInput,
    SkillEvidenceInput,
    SocialValidationInput,
    VerifiedSkill,
)
from src.credibility.pillars import days_since
from src.github.provider import RepositoryMetadataProvider, fetch_or_empty
from src.models import CredibilitySummary, InviteStatus, ProjectRole, ProjectStatus
from src.store.models import ActivityEntry, Profile, Project
from src.store.records import RecordStore

logger = logging.getLogger(__name__)

ABANDONED_ACTION = "project_abandoned"
SKILL_CHANGE_ACTIONS = frozenset({"skill_added", "profile_updated"})
ACTIVE_STATUSES = frozenset({ProjectStatus.OPEN, ProjectStatus.IN_PROGRESS})


class ProfileNotFoundError(Exception):
    """Raised when a user profile does not exist."""

    pass


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an ISO8601 timestamp, returning None when absent or malformed."""
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring malformed timestamp: %r", raw)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _to_activity_records(entries: list[ActivityEntry]) -> list[ActivityRecord]:
    records = []
    for entry in entries:
        moment = parse_timestamp(entry.created_at)
        if moment is not None:
            records.append(ActivityRecord(date=moment, type=entry.action_type))
    return records


def _project_record(project: Project, role: ProjectRole) -> ProjectRecord:
    return ProjectRecord(
        project_id=project.id,
        title=project.title,
        role=role,
        status=project.status,
        required_skills=project.required_skills,
        team_size=project.team_size,
        created_at=project.created_at,
    )


class CredibilityService:
    """Cache-first access to user credibility.

    The record store and cache are injected; the repository provider is
    optional and its failures only remove repository signals.
    """

    def __init__(
        self,
        store: RecordStore,
        cache: CredibilityCache,
        repo_provider: RepositoryMetadataProvider | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._repo_provider = repo_provider

    # --- Public API ---

    async def get_user_credibility(self, user_id: str) -> CredibilityScoreBreakdown:
        """Compute the full breakdown for a user and write it through to the cache.

        Raises:
            ProfileNotFoundError: If the user has no profile.
        """
        data = await self.build_input(user_id)
        now = datetime.now(UTC)
        result = compute_credibility_score(data, now)
        self._write_cache(user_id, result, now)
        return result

    async def get_user_credibility_summary(self, user_id: str) -> CredibilitySummary:
        """Return the cached summary if live, otherwise recompute."""
        cached = self._read_cache(user_id)
        if cached is not None:
            return cached
        full = await self.get_user_credibility(user_id)
        return full.summary()

    async def get_batch_credibility_summaries(
        self, user_ids: list[str],
    ) -> dict[str, CredibilitySummary]:
        """Summaries for every id; a failing id maps to the neutral summary."""

        async def _one(user_id: str) -> tuple[str, CredibilitySummary]:
            try:
                return user_id, await self.get_user_credibility_summary(user_id)
            except Exception as exc:
                logger.warning("Credibility unavailable for %s: %s", user_id, exc)
                return user_id, CredibilitySummary.neutral()

        unique_ids = list(dict.fromkeys(user_ids))
        pairs = await asyncio.gather(*(_one(uid) for uid in unique_ids))
        return dict(pairs)

    async def build_input(self, user_id: str) -> CredibilityInput:
        """Assemble every pillar input for ``user_id``."""
        profile = self._store.get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(f"Profile '{user_id}' not found")

        skill, execution, social, reliability, consistency = await asyncio.gather(
            self._fetch_skill_evidence(profile),
            self._fetch_execution_proof(profile),
            self._fetch_social_validation(profile),
            self._fetch_reliability(profile),
            self._fetch_consistency(profile),
        )
        return CredibilityInput(
            user_id=user_id,
            skill_evidence=skill,
            execution_proof=execution,
            social_validation=social,
            reliability=reliability,
            consistency=consistency,
        )

    # --- Cache ---

    def _read_cache(self, user_id: str) -> CredibilitySummary | None:
        try:
            entry = self._cache.get_live(user_id)
        except Exception as exc:  # a broken cache falls back to fresh computation
            logger.warning("Credibility cache read failed for %s: %s", user_id, exc)
            return None
        return entry.summary() if entry is not None else None

    def _write_cache(
        self, user_id: str, result: CredibilityScoreBreakdown, now: datetime,
    ) -> None:
        try:
            self._cache.set(self._cache.build_entry(user_id, result, now))
        except Exception as exc:  # cache writes never fail a read
            logger.warning("Credibility cache write failed for %s: %s", user_id, exc)

    # --- Pillar data ---

    async def _fetch_skill_evidence(self, profile: Profile) -> SkillEvidenceInput:
        verified = [
            VerifiedSkill(
                skill=v.skill_name, type=v.verification_type, proficiency=v.proficiency,
            )
            for v in self._store.verifications_for(profile.id)
        ]
        metadata = await fetch_or_empty(self._repo_provider, profile.github_username)
        return SkillEvidenceInput(
            declared_skills=profile.skills,
            verified_skills=verified,
            repo_languages=metadata.languages,
            repo_topics=metadata.topics,
        )

    def _participations(self, user_id: str) -> list[ProjectRecord]:
        """Owned projects as leader, then member projects, one record per project."""
        records: dict[str, ProjectRecord] = {}
        for project in self._store.projects_owned_by(user_id):
            records[project.id] = _project_record(project, ProjectRole.LEADER)

        memberships = self._store.memberships_for_user(user_id)
        roles = {m.project_id: m.role for m in memberships}
        for project in self._store.get_projects(roles):
            if project.id not in records:
                records[project.id] = _project_record(project, roles[project.id])
        return list(records.values())

    async def _fetch_execution_proof(self, profile: Profile) -> ExecutionProofInput:
        projects = self._participations(profile.id)
        return ExecutionProofInput(
            completed_projects=[p for p in projects if p.status == ProjectStatus.COMPLETED],
            active_projects=[p for p in projects if p.status in ACTIVE_STATUSES],
            all_projects=projects,
            has_portfolio=bool(profile.portfolio_url or profile.website),
        )

    async def _fetch_social_validation(self, profile: Profile) -> SocialValidationInput:
        endorsements = [
            EndorsementRecord(
                endorser_id=e.endorser_id,
                endorsed_id=e.endorsed_id,
                skill_name=e.skill_name,
                project_id=e.project_id,
                endorser_credibility=self._known_credibility(e.endorser_id),
            )
            for e in self._store.endorsements_for(profile.id)
        ]

        project_ids = {m.project_id for m in self._store.memberships_for_user(profile.id)}
        project_ids.update(p.id for p in self._store.projects_owned_by(profile.id))
        shared: dict[str, int] = {}
        for member in self._store.members_of_projects(sorted(project_ids)):
            if member.user_id != profile.id:
                shared[member.user_id] = shared.get(member.user_id, 0) + 1

        return SocialValidationInput(
            endorsements=endorsements,
            unique_collaborators=frozenset(shared),
            repeat_collaborators=sum(1 for count in shared.values() if count >= 2),
        )

    def _known_credibility(self, user_id: str) -> int | None:
        """Endorser credibility from a live cache entry, without recomputing."""
        try:
            entry = self._cache.get_live(user_id)
        except Exception as exc:  # endorser quality is optional
            logger.warning("Credibility cache read failed for %s: %s", user_id, exc)
            return None
        return entry.credibility_score if entry is not None else None

    async def _fetch_reliability(self, profile: Profile) -> ReliabilityInput:
        owned = self._store.projects_owned_by(profile.id)
        memberships = self._store.memberships_for_user(profile.id)
        member_projects = self._store.get_projects(m.project_id for m in memberships)
        statuses = [p.status for p in owned] + [p.status for p in member_projects]

        activity = self._store.activity_for(profile.id)
        abandoned = sum(1 for a in activity if a.action_type == ABANDONED_ACTION)

        invites = self._store.invites_received(profile.id)

        last_active = None
        if activity:
            last_active = parse_timestamp(activity[-1].created_at)
        if last_active is None:
            last_active = parse_timestamp(profile.updated_at)

        return ReliabilityInput(
            total_projects_joined=len(memberships) + len(owned),
            projects_completed=statuses.count(ProjectStatus.COMPLETED),
            projects_abandoned=abandoned,
            invites_received=len(invites),
            invites_accepted=sum(1 for i in invites if i.status == InviteStatus.ACCEPTED),
            invites_rejected=sum(1 for i in invites if i.status == InviteStatus.REJECTED),
            invites_ignored=sum(1 for i in invites if i.status == InviteStatus.PENDING),
            last_active_at=last_active,
            account_created_at=self._account_created_at(profile),
        )

    async def _fetch_consistency(self, profile: Profile) -> ConsistencyInput:
        activity = _to_activity_records(self._store.activity_for(profile.id))
        return ConsistencyInput(
            activity_log=activity,
            account_age_days=days_since(self._account_created_at(profile)),
            skill_changes=sum(1 for a in activity if a.type in SKILL_CHANGE_ACTIONS),
        )

    @staticmethod
    def _account_created_at(profile: Profile) -> datetime:
        return (
            parse_timestamp(profile.created_at)
            or parse_timestamp(profile.updated_at)
            or datetime.now(UTC)
        )
