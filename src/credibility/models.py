"""Credibility scoring Pydantic models.

This module defines the data models for the credibility engine:
- Pillar inputs (SkillEvidenceInput, ExecutionProofInput, ...)
- Pillar breakdowns (SkillEvidenceBreakdown, ExecutionProofBreakdown, ...)
- The composite CredibilityScoreBreakdown

Every input model provides an ``empty()`` constructor. The zero-data
baseline is built from those constructors and flows through the same
scoring path as any other input.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models import (
    CredibilityLabel,
    CredibilitySummary,
    ProficiencyLevel,
    ProjectRole,
    ProjectStatus,
    VerificationType,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Input records ---


class VerifiedSkill(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill: str
    type: VerificationType = VerificationType.SELF_DECLARED
    proficiency: ProficiencyLevel = ProficiencyLevel.INTERMEDIATE


class ProjectRecord(BaseModel):
    """A user's participation in one project."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    title: str = ""
    role: ProjectRole = ProjectRole.MEMBER
    status: ProjectStatus = ProjectStatus.OPEN
    required_skills: list[str] = Field(default_factory=list)
    team_size: int = 1
    created_at: str | None = None


class EndorsementRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    endorser_id: str
    endorsed_id: str
    skill_name: str
    project_id: str | None = None
    endorser_credibility: int | None = Field(default=None, ge=0, le=100)


class ActivityRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime
    type: str


# --- Pillar inputs ---


class SkillEvidenceInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    declared_skills: list[str] = Field(default_factory=list)
    verified_skills: list[VerifiedSkill] = Field(default_factory=list)
    repo_languages: dict[str, int] = Field(default_factory=dict)
    repo_topics: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> SkillEvidenceInput:
        return cls()


class ExecutionProofInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    completed_projects: list[ProjectRecord] = Field(default_factory=list)
    active_projects: list[ProjectRecord] = Field(default_factory=list)
    all_projects: list[ProjectRecord] = Field(default_factory=list)
    has_portfolio: bool = False

    @classmethod
    def empty(cls) -> ExecutionProofInput:
        return cls()


class SocialValidationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    endorsements: list[EndorsementRecord] = Field(default_factory=list)
    unique_collaborators: frozenset[str] = frozenset()
    repeat_collaborators: int = Field(default=0, ge=0)

    @classmethod
    def empty(cls) -> SocialValidationInput:
        return cls()


class ReliabilityInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_projects_joined: int = Field(default=0, ge=0)
    projects_completed: int = Field(default=0, ge=0)
    projects_abandoned: int = Field(default=0, ge=0)
    invites_received: int = Field(default=0, ge=0)
    invites_accepted: int = Field(default=0, ge=0)
    invites_rejected: int = Field(default=0, ge=0)
    invites_ignored: int = Field(default=0, ge=0)
    last_active_at: datetime | None = None
    account_created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def empty(cls, now: datetime | None = None) -> ReliabilityInput:
        return cls(account_created_at=now or _utcnow())


class ConsistencyInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    activity_log: list[ActivityRecord] = Field(default_factory=list)
    account_age_days: float = Field(default=0, ge=0)
    skill_changes: int = Field(default=0, ge=0)

    @classmethod
    def empty(cls) -> ConsistencyInput:
        return cls()


class CredibilityInput(BaseModel):
    """Everything the engine needs to score one user."""

    model_config = ConfigDict(frozen=True)

    user_id: str = ""
    skill_evidence: SkillEvidenceInput = Field(default_factory=SkillEvidenceInput.empty)
    execution_proof: ExecutionProofInput = Field(default_factory=ExecutionProofInput.empty)
    social_validation: SocialValidationInput = Field(
        default_factory=SocialValidationInput.empty,
    )
    reliability: ReliabilityInput = Field(default_factory=ReliabilityInput.empty)
    consistency: ConsistencyInput = Field(default_factory=ConsistencyInput.empty)

    @classmethod
    def empty(cls, user_id: str = "", now: datetime | None = None) -> CredibilityInput:
        return cls(user_id=user_id, reliability=ReliabilityInput.empty(now))


# --- Pillar breakdowns ---


class SkillEvidenceBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    declared_count: int
    declared_score: int
    verified_count: int
    verification_bonus: int
    repo_signal_count: int
    repo_score: int
    confidence_decay: int
    signals: list[str]


class ExecutionProofBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    completed_count: int
    completion_score: int
    active_score: int
    leader_count: int
    role_bonus: int
    avg_complexity: int
    complexity_score: int
    portfolio_bonus: int
    signals: list[str]


class SocialValidationBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    endorsement_count: int
    unique_endorsers: int
    endorsement_score: int
    endorser_quality_bonus: int
    repeat_collaborator_count: int
    collaborator_score: int
    collaborator_diversity: int
    diminishing_returns: bool
    signals: list[str]


class ReliabilityBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    completion_rate: int
    invite_response_rate: int
    dropout_penalty: int
    recency_bonus: int
    inactivity_penalty: int
    signals: list[str]


class ConsistencyBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    active_months: int
    total_months: int
    activity_ratio: float
    max_streak: int
    steadiness_bonus: int
    burst_penalty: int
    skill_consistency: int
    age_bonus: int
    signals: list[str]


class PillarBreakdowns(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_evidence: SkillEvidenceBreakdown
    execution_proof: ExecutionProofBreakdown
    social_validation: SocialValidationBreakdown
    reliability: ReliabilityBreakdown
    consistency: ConsistencyBreakdown


class CredibilityScoreBreakdown(BaseModel):
    """Explainable composite credibility score for one user."""

    model_config = ConfigDict(frozen=True)

    credibility_score: int = Field(ge=0, le=100)
    confidence_multiplier: float = Field(ge=0.1, le=1.0)
    final_rank_score: int = Field(ge=0, le=100)
    data_points_count: int = Field(ge=0)
    pillars: PillarBreakdowns
    label: CredibilityLabel
    top_signals: list[str] = Field(max_length=5)
    computed_at: str  # ISO8601

    def summary(self) -> CredibilitySummary:
        return CredibilitySummary(
            credibility_score=self.credibility_score,
            final_rank_score=self.final_rank_score,
            label=self.label,
            confidence_multiplier=self.confidence_multiplier,
        )
