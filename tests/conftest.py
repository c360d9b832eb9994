"""Shared test fixtures for teammate-credibility."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from src.credibility.cache import InMemoryCredibilityCache
from src.credibility.models import (
    ActivityRecord,
    EndorsementRecord,
    ProjectRecord,
    VerifiedSkill,
)
from src.matching.models import MatchCandidate, MatchingEngineInput
from src.models import CredibilityLabel, CredibilitySummary, ProjectStatus
from src.store.models import Profile, Project
from src.store.records import SQLiteRecordStore

# Fixed clock for time-dependent scorers
NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def records_db_path(tmp_path: Path) -> str:
    """Create a temporary database path for record store tests."""
    return str(tmp_path / "test_records.db")


@pytest.fixture
def store(records_db_path: str):
    with SQLiteRecordStore(records_db_path) as s:
        yield s


@pytest.fixture
def cache() -> InMemoryCredibilityCache:
    return InMemoryCredibilityCache()


# --- Factory functions for test data ---


def make_profile(**kwargs: Any) -> Profile:
    """Factory for Profile with sensible defaults."""
    defaults: dict[str, Any] = {
        "id": "user-1",
        "username": "user1",
        "skills": [],
        "created_at": days_ago(200).isoformat(),
        "updated_at": days_ago(3).isoformat(),
    }
    defaults.update(kwargs)
    return Profile(**defaults)


def make_project(**kwargs: Any) -> Project:
    """Factory for Project with sensible defaults."""
    defaults: dict[str, Any] = {
        "id": "proj-1",
        "owner_id": "owner-1",
        "title": "Realtime chess engine",
        "description": "A multiplayer chess platform with websocket matchmaking",
        "status": ProjectStatus.OPEN,
        "required_skills": ["python", "react"],
        "team_size": 3,
        "created_at": days_ago(30).isoformat(),
    }
    defaults.update(kwargs)
    return Project(**defaults)


def make_project_record(**kwargs: Any) -> ProjectRecord:
    """Factory for ProjectRecord with sensible defaults."""
    defaults: dict[str, Any] = {
        "project_id": "proj-1",
        "title": "Test project",
        "status": ProjectStatus.COMPLETED,
        "required_skills": [],
        "team_size": 1,
    }
    defaults.update(kwargs)
    return ProjectRecord(**defaults)


def make_endorsement(endorser_id: str = "peer-1", **kwargs: Any) -> EndorsementRecord:
    """Factory for EndorsementRecord with sensible defaults."""
    defaults: dict[str, Any] = {
        "endorser_id": endorser_id,
        "endorsed_id": "user-1",
        "skill_name": "python",
    }
    defaults.update(kwargs)
    return EndorsementRecord(**defaults)


def make_verified_skill(**kwargs: Any) -> VerifiedSkill:
    defaults: dict[str, Any] = {"skill": "python"}
    defaults.update(kwargs)
    return VerifiedSkill(**defaults)


def make_activity(moment: datetime, action: str = "login") -> ActivityRecord:
    return ActivityRecord(date=moment, type=action)


def make_summary(final_rank_score: int = 50, **kwargs: Any) -> CredibilitySummary:
    """Factory for CredibilitySummary with sensible defaults."""
    defaults: dict[str, Any] = {
        "credibility_score": final_rank_score,
        "final_rank_score": final_rank_score,
        "label": CredibilityLabel.PROMISING,
        "confidence_multiplier": 1.0,
    }
    defaults.update(kwargs)
    return CredibilitySummary(**defaults)


def make_candidate(**kwargs: Any) -> MatchCandidate:
    """Factory for MatchCandidate with sensible defaults."""
    defaults: dict[str, Any] = {
        "id": "cand-1",
        "skills": [],
    }
    defaults.update(kwargs)
    return MatchCandidate(**defaults)


def make_engine_input(**kwargs: Any) -> MatchingEngineInput:
    """Factory for MatchingEngineInput with sensible defaults."""
    defaults: dict[str, Any] = {
        "target_id": "proj-1",
        "required_skills": ["python", "react", "docker", "postgresql"],
        "keywords": [],
    }
    defaults.update(kwargs)
    return MatchingEngineInput(**defaults)
