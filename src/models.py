"""Shared Pydantic data models for the teammate credibility service."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class VerificationType(str, Enum):
    SELF_DECLARED = "self_declared"
    QUIZ_PASSED = "quiz_passed"
    PEER_VERIFIED = "peer_verified"
    PROJECT_PROVEN = "project_proven"
    REPO_VERIFIED = "repo_verified"


class ProficiencyLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ProjectRole(str, Enum):
    LEADER = "leader"
    MEMBER = "member"


class ProjectStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class CredibilityLabel(str, Enum):
    ELITE = "Elite"
    TRUSTED = "Trusted"
    PROMISING = "Promising"
    EMERGING = "Emerging"
    NEW = "New"


class MatchLabel(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    LOW = "Low"


# --- Credibility summary ---


class CredibilitySummary(BaseModel):
    """Minimal credibility info used by the ranking engine."""

    model_config = ConfigDict(frozen=True)

    credibility_score: int = Field(ge=0, le=100)
    final_rank_score: int = Field(ge=0, le=100)
    label: CredibilityLabel
    confidence_multiplier: float = Field(ge=0.1, le=1.0)

    @classmethod
    def neutral(cls) -> CredibilitySummary:
        """Minimum summary substituted when a user's score cannot be computed."""
        return cls(
            credibility_score=0,
            final_rank_score=0,
            label=CredibilityLabel.NEW,
            confidence_multiplier=0.1,
        )
