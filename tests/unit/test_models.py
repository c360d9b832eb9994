"""Tests for shared Pydantic data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.credibility.models import (
    CredibilityInput,
    EndorsementRecord,
    ReliabilityInput,
)
from src.matching.models import MatchCandidate
from src.models import CredibilityLabel, CredibilitySummary, InviteStatus, ProjectStatus
from src.store.models import Invite, Profile
from tests.conftest import NOW


class TestCredibilitySummary:
    def test_neutral(self):
        neutral = CredibilitySummary.neutral()
        assert neutral.credibility_score == 0
        assert neutral.final_rank_score == 0
        assert neutral.label == CredibilityLabel.NEW
        assert neutral.confidence_multiplier == 0.1

    def test_label_serializes_as_display_name(self):
        data = CredibilitySummary.neutral().model_dump(mode="json")
        assert data["label"] == "New"

    @pytest.mark.parametrize("field,value", [
        ("credibility_score", 101),
        ("final_rank_score", -1),
        ("confidence_multiplier", 0.05),
    ])
    def test_bounds(self, field, value):
        data = CredibilitySummary.neutral().model_dump()
        data[field] = value
        with pytest.raises(ValidationError):
            CredibilitySummary.model_validate(data)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            CredibilitySummary.neutral().credibility_score = 5  # type: ignore[misc]


class TestEnums:
    def test_values_from_strings(self):
        assert ProjectStatus("in_progress") == ProjectStatus.IN_PROGRESS
        assert Invite(
            id="i", project_id="p", sender_id="a", receiver_id="b", status="accepted",
        ).status == InviteStatus.ACCEPTED

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Invite(id="i", project_id="p", sender_id="a", receiver_id="b", status="maybe")


class TestInputs:
    def test_empty_input_uses_given_clock(self):
        empty = CredibilityInput.empty("u1", now=NOW)
        assert empty.user_id == "u1"
        assert empty.reliability.account_created_at == NOW
        assert empty.skill_evidence.declared_skills == []

    def test_reliability_counts_non_negative(self):
        with pytest.raises(ValidationError):
            ReliabilityInput(projects_completed=-1, account_created_at=NOW)

    def test_endorser_credibility_bounded(self):
        with pytest.raises(ValidationError):
            EndorsementRecord(endorser_id="a", endorsed_id="b", skill_name="go",
                              endorser_credibility=150)


class TestMatchingModels:
    def test_candidate_defaults(self):
        candidate = MatchCandidate(id="c")
        assert candidate.skills == []
        assert candidate.repo_languages == {}
        assert candidate.credibility is None

    def test_profile_defaults(self):
        profile = Profile(id="u")
        assert profile.skills == []
        assert profile.github_username is None
