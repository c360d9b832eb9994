"""Pydantic models for pairwise compatibility and candidate ranking."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.models import CredibilitySummary, MatchLabel

# Weight tables, each sums to 1.0

COMPATIBILITY_WEIGHTS: dict[str, float] = {
    "skill_overlap": 0.55,
    "complementary": 0.20,
    "availability": 0.15,
    "timezone": 0.10,
}

TEAMMATE_WEIGHTS: dict[str, float] = {
    "skill_overlap": 0.45,
    "github_language": 0.20,
    "repo_relevance": 0.15,
    "complementary": 0.20,
}

TEAMMATE_WEIGHTS_WITH_CREDIBILITY: dict[str, float] = {
    "skill_overlap": 0.35,
    "github_language": 0.15,
    "repo_relevance": 0.10,
    "complementary": 0.15,
    "credibility": 0.25,
}


# --- Pairwise compatibility ---


class MatchUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    skills: list[str] = Field(default_factory=list)
    availability: str | None = None
    timezone: str | None = None


class MatchTarget(BaseModel):
    """A project (or requesting user) that candidates are scored against."""

    model_config = ConfigDict(frozen=True)

    id: str
    required_skills: list[str] = Field(default_factory=list)
    availability_required: str | None = None
    timezone_preferred: str | None = None


class MatchScoreDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_overlap: int = Field(ge=0, le=100)
    complementary_score: int = Field(ge=0, le=100)
    availability_score: int = Field(ge=0, le=100)
    timezone_score: int = Field(ge=0, le=100)
    missing_skills: list[str] = Field(default_factory=list)


class MatchScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_id: str
    score: int = Field(ge=0, le=100)
    label: MatchLabel
    details: MatchScoreDetails


# --- Candidate ranking ---


class MatchCandidate(BaseModel):
    """A candidate enriched with repository metadata and credibility."""

    model_config = ConfigDict(frozen=True)

    id: str
    skills: list[str] = Field(default_factory=list)
    github_username: str | None = None
    repo_languages: dict[str, int] = Field(default_factory=dict)
    repo_topics: list[str] = Field(default_factory=list)
    repo_names: list[str] = Field(default_factory=list)
    credibility: CredibilitySummary | None = None


class MatchingEngineInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_id: str
    required_skills: list[str] = Field(default_factory=list)
    description: str = ""
    keywords: list[str] = Field(default_factory=list)


class TeammateMatchDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_overlap_score: int = Field(ge=0, le=100)
    repo_language_score: int = Field(ge=0, le=100)
    repo_relevance_score: int = Field(ge=0, le=100)
    complementary_score: int = Field(ge=0, le=100)
    credibility_score: int | None = Field(default=None, ge=0, le=100)
    missing_skills: list[str] = Field(default_factory=list)


class MatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    score: int = Field(ge=0, le=100)
    confidence: float = Field(ge=0.0, le=1.0)
    label: MatchLabel
    matched_skills: list[str] = Field(default_factory=list)
    details: TeammateMatchDetails
    credibility: CredibilitySummary | None = None
