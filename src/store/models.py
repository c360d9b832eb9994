"""Pydantic models for rows read from the record store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.models import (
    InviteStatus,
    ProficiencyLevel,
    ProjectRole,
    ProjectStatus,
    VerificationType,
)


class Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    github_username: str | None = None
    bio: str | None = None
    role: str | None = None
    skills: list[str] = Field(default_factory=list)
    availability: str | None = None
    timezone: str | None = None
    portfolio_url: str | None = None
    website: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: str
    title: str = ""
    description: str = ""
    status: ProjectStatus = ProjectStatus.OPEN
    required_skills: list[str] = Field(default_factory=list)
    team_size: int = 1
    availability_required: str | None = None
    timezone_preferred: str | None = None
    created_at: str | None = None


class Membership(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str
    user_id: str
    role: ProjectRole = ProjectRole.MEMBER


class Endorsement(BaseModel):
    model_config = ConfigDict(frozen=True)

    endorser_id: str
    endorsed_id: str
    skill_name: str
    project_id: str | None = None


class Invite(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    project_id: str
    sender_id: str
    receiver_id: str
    status: InviteStatus = InviteStatus.PENDING
    message: str | None = None
    created_at: str | None = None


class SkillVerification(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    skill_name: str
    verification_type: VerificationType = VerificationType.SELF_DECLARED
    proficiency: ProficiencyLevel = ProficiencyLevel.INTERMEDIATE


class ActivityEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    action_type: str
    created_at: str
