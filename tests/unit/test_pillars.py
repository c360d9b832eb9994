"""Tests for the five credibility pillar scorers."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from src.credibility.models import (
    ConsistencyInput,
    ExecutionProofInput,
    ReliabilityInput,
    SkillEvidenceInput,
    SocialValidationInput,
)
from src.credibility.pillars import (
    completion_points,
    compute_consistency,
    compute_execution_proof,
    compute_reliability,
    compute_skill_evidence,
    compute_social_validation,
    days_since,
    endorser_points,
    longest_monthly_streak,
    recency_points,
)
from src.models import ProficiencyLevel, ProjectRole, ProjectStatus, VerificationType
from tests.conftest import (
    NOW,
    days_ago,
    make_activity,
    make_endorsement,
    make_project_record,
    make_verified_skill,
)


class TestSkillEvidence:
    """Tests for declared, verified and repository skill signals."""

    def test_declared_skills_are_decayed(self) -> None:
        result = compute_skill_evidence(
            SkillEvidenceInput(declared_skills=["python", "react", "docker"]),
        )
        # (3/8) * 40 * 0.5 = 7.5
        assert result.declared_score == 8
        assert result.confidence_decay == 6
        assert result.score == 2

    def test_declared_skills_deduplicated_case_insensitively(self) -> None:
        result = compute_skill_evidence(
            SkillEvidenceInput(declared_skills=["Python", "python ", " PYTHON"]),
        )
        assert result.declared_count == 1

    def test_declared_skills_capped_at_eight(self) -> None:
        skills = [f"skill-{i}" for i in range(12)]
        result = compute_skill_evidence(SkillEvidenceInput(declared_skills=skills))
        assert result.declared_score == 20

    def test_verification_weighted_by_type_and_proficiency(self) -> None:
        verified = make_verified_skill(
            type=VerificationType.QUIZ_PASSED, proficiency=ProficiencyLevel.EXPERT,
        )
        result = compute_skill_evidence(
            SkillEvidenceInput(declared_skills=["python"], verified_skills=[verified]),
        )
        # 0.8 * 1.0 * 12 = 9.6
        assert result.verification_bonus == 10
        assert result.confidence_decay == 0

    def test_verification_bonus_capped(self) -> None:
        verified = [
            make_verified_skill(
                skill=f"s{i}",
                type=VerificationType.PROJECT_PROVEN,
                proficiency=ProficiencyLevel.EXPERT,
            )
            for i in range(5)
        ]
        result = compute_skill_evidence(SkillEvidenceInput(verified_skills=verified))
        assert result.verification_bonus == 45
        assert result.score == 45

    def test_repo_signals(self) -> None:
        result = compute_skill_evidence(SkillEvidenceInput(
            repo_languages={f"lang{i}": 1 for i in range(12)},
            repo_topics=[f"topic{i}" for i in range(10)],
        ))
        assert result.repo_signal_count == 22
        assert result.repo_score == 23

    def test_empty_input_scores_zero(self) -> None:
        result = compute_skill_evidence(SkillEvidenceInput.empty())
        assert result.score == 0
        assert result.signals == []


class TestExecutionProof:
    """Tests for completed work, roles, complexity and portfolio."""

    def test_single_completed_project(self) -> None:
        project = make_project_record(required_skills=["a", "b", "c", "d"], team_size=3)
        result = compute_execution_proof(ExecutionProofInput(completed_projects=[project]))
        assert result.completion_score == 15
        assert result.avg_complexity == 39
        assert result.complexity_score == 6
        assert result.score == 21

    @pytest.mark.parametrize(("count", "points"), [
        (0, 0), (1, 15), (2, 27), (3, 35), (4, 40), (9, 40),
    ])
    def test_completion_points_diminish(self, count: int, points: int) -> None:
        assert completion_points(count) == points

    def test_role_bonus_capped(self) -> None:
        leaders = [
            make_project_record(project_id=f"l{i}", role=ProjectRole.LEADER) for i in range(3)
        ]
        members = [
            make_project_record(project_id=f"m{i}", role=ProjectRole.MEMBER) for i in range(4)
        ]
        result = compute_execution_proof(ExecutionProofInput(all_projects=leaders + members))
        assert result.leader_count == 3
        assert result.role_bonus == 25

    def test_active_projects_and_portfolio(self) -> None:
        active = [
            make_project_record(project_id=f"a{i}", status=ProjectStatus.IN_PROGRESS)
            for i in range(3)
        ]
        result = compute_execution_proof(
            ExecutionProofInput(active_projects=active, has_portfolio=True),
        )
        assert result.active_score == 10
        assert result.portfolio_bonus == 10
        assert result.score == 20
        assert "Portfolio link provided (+10 pts)" in result.signals

    def test_zero_team_size_treated_as_one(self) -> None:
        project = make_project_record(team_size=0)
        result = compute_execution_proof(ExecutionProofInput(completed_projects=[project]))
        assert result.avg_complexity == 5


class TestSocialValidation:
    """Tests for endorsements and collaborators."""

    @pytest.mark.parametrize(("endorsers", "points"), [
        (1, 8), (5, 40), (6, 44), (7, 48), (8, 50), (20, 50),
    ])
    def test_endorser_points(self, endorsers: int, points: int) -> None:
        assert endorser_points(endorsers) == points

    def test_sixth_endorser_worth_less_than_first(self) -> None:
        first = endorser_points(1) - endorser_points(0)
        sixth = endorser_points(6) - endorser_points(5)
        assert sixth < first

    def test_unique_endorsers_counted_once(self) -> None:
        endorsements = [
            make_endorsement("peer-1", skill_name="python"),
            make_endorsement("peer-1", skill_name="react"),
            make_endorsement("peer-2"),
        ]
        result = compute_social_validation(SocialValidationInput(endorsements=endorsements))
        assert result.endorsement_count == 3
        assert result.unique_endorsers == 2
        assert result.endorsement_score == 16
        assert not result.diminishing_returns

    def test_diminishing_returns_flag(self) -> None:
        endorsements = [make_endorsement(f"peer-{i}") for i in range(6)]
        result = compute_social_validation(SocialValidationInput(endorsements=endorsements))
        assert result.diminishing_returns
        assert "Endorsement diminishing returns applied" in result.signals

    def test_credible_endorsers_add_quality_bonus(self) -> None:
        endorsements = [
            make_endorsement("peer-1", endorser_credibility=70),
            make_endorsement("peer-2", endorser_credibility=60),
            make_endorsement("peer-3", endorser_credibility=59),
            make_endorsement("peer-4"),
        ]
        result = compute_social_validation(SocialValidationInput(endorsements=endorsements))
        assert result.endorser_quality_bonus == 10

    def test_collaborators(self) -> None:
        result = compute_social_validation(SocialValidationInput(
            unique_collaborators=frozenset(f"c{i}" for i in range(6)),
            repeat_collaborators=3,
        ))
        assert result.collaborator_score == 20
        assert result.collaborator_diversity == 15
        assert result.score == 35


class TestReliability:
    """Tests for completion, invites, dropouts and recency."""

    def test_new_user_is_neutral(self) -> None:
        result = compute_reliability(ReliabilityInput(account_created_at=NOW), NOW)
        assert result.completion_rate == 50
        assert result.invite_response_rate == 100
        assert result.inactivity_penalty == 0
        assert result.score == 40

    def test_no_activity_after_a_week_is_penalized(self) -> None:
        result = compute_reliability(
            ReliabilityInput(account_created_at=days_ago(30)), NOW,
        )
        assert result.inactivity_penalty == 10
        assert result.score == 30

    def test_mixed_history(self) -> None:
        data = ReliabilityInput(
            total_projects_joined=4,
            projects_completed=2,
            projects_abandoned=1,
            invites_received=4,
            invites_accepted=2,
            invites_rejected=1,
            invites_ignored=1,
            last_active_at=days_ago(0.5),
            account_created_at=days_ago(365),
        )
        result = compute_reliability(data, NOW)
        assert result.completion_rate == 50
        assert result.invite_response_rate == 75
        assert result.dropout_penalty == 10
        assert result.recency_bonus == 20
        assert result.score == 45

    def test_long_inactivity_penalty(self) -> None:
        data = ReliabilityInput(last_active_at=days_ago(90), account_created_at=days_ago(365))
        result = compute_reliability(data, NOW)
        assert result.recency_bonus == 0
        assert result.inactivity_penalty == 9
        assert result.score == 31

    def test_invites_without_recorded_actions_keep_full_rate(self) -> None:
        data = ReliabilityInput(invites_received=3, account_created_at=NOW)
        assert compute_reliability(data, NOW).invite_response_rate == 100

    def test_dropout_penalty_capped(self) -> None:
        data = ReliabilityInput(projects_abandoned=5, account_created_at=NOW)
        assert compute_reliability(data, NOW).dropout_penalty == 30

    @pytest.mark.parametrize(("days", "points"), [
        (0.2, 20), (1, 20), (5, 15), (10, 10), (30, 5), (31, 0),
    ])
    def test_recency_points(self, days: float, points: int) -> None:
        assert recency_points(days) == points


class TestConsistency:
    """Tests for monthly activity patterns."""

    def test_steady_activity(self) -> None:
        log = [
            make_activity(datetime(2026, month, 10, tzinfo=UTC)) for month in (1, 2, 3, 4)
        ]
        result = compute_consistency(ConsistencyInput(activity_log=log, account_age_days=120))
        assert result.total_months == 4
        assert result.active_months == 4
        assert result.activity_ratio == 1.0
        assert result.max_streak == 4
        assert result.steadiness_bonus == 24
        assert result.age_bonus == 6
        assert result.score == 85

    def test_steadiness_needs_three_active_months(self) -> None:
        log = [make_activity(datetime(2026, month, 1, tzinfo=UTC)) for month in (1, 2)]
        result = compute_consistency(ConsistencyInput(activity_log=log, account_age_days=60))
        assert result.max_streak == 2
        assert result.steadiness_bonus == 0

    def test_burst_activity_penalized(self) -> None:
        log = [make_activity(datetime(2026, 3, day, tzinfo=UTC)) for day in range(1, 13)]
        result = compute_consistency(ConsistencyInput(activity_log=log, account_age_days=200))
        assert result.total_months == 7
        assert result.burst_penalty == 6
        assert result.score == 26

    def test_frequent_skill_changes(self) -> None:
        result = compute_consistency(ConsistencyInput(skill_changes=9))
        assert result.skill_consistency == 3
        assert "Frequent skill changes (-12 pts)" in result.signals

    def test_empty_log(self) -> None:
        result = compute_consistency(ConsistencyInput.empty())
        assert result.total_months == 1
        assert result.active_months == 0
        assert result.score == 17

    def test_streak_spans_year_boundary(self) -> None:
        months = {(2025, 11), (2025, 12), (2026, 1), (2026, 3)}
        assert longest_monthly_streak(months) == 3

    def test_streak_of_nothing(self) -> None:
        assert longest_monthly_streak(set()) == 0


def test_days_since_never_negative() -> None:
    assert days_since(days_ago(-5), NOW) == 0.0
    assert days_since(days_ago(2), NOW) == pytest.approx(2.0)
