"""Composite credibility scorer.

Combines the five pillar scores into a single credibility score and
discounts it by a confidence multiplier derived from data volume:

    credibility_score = sum(pillar_score * pillar_weight)
    confidence = f(data points available), clamped to [0.1, 1.0]
    final_rank_score = credibility_score * confidence
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from src.credibility.models import (
    CredibilityInput,
    CredibilityScoreBreakdown,
    PillarBreakdowns,
)
from src.credibility.pillars import (
    compute_consistency,
    compute_execution_proof,
    compute_reliability,
    compute_skill_evidence,
    compute_social_validation,
    days_since,
    unique_skills,
)
from src.models import CredibilitySummary
from src.scoring import clamp_score, credibility_label

CREDIBILITY_WEIGHTS: dict[str, float] = {
    "skill_evidence": 0.25,
    "execution_proof": 0.30,
    "social_validation": 0.15,
    "reliability": 0.20,
    "consistency": 0.10,
}

MAX_TOP_SIGNALS = 5
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0


@dataclass
class ConfidenceResult:
    """Confidence multiplier and the number of data points behind it."""

    multiplier: float
    data_points: int


def compute_confidence_multiplier(
    data: CredibilityInput, now: datetime | None = None,
) -> ConfidenceResult:
    """Calculate confidence from available data volume.

    Completed projects earn 0.20; active projects earn 0.10 only when
    there are no completed ones. The two credits never stack.
    """
    confidence = 0.0
    data_points = 0
    skills = data.skill_evidence
    execution = data.execution_proof
    social = data.social_validation

    declared = unique_skills(skills.declared_skills)
    if declared:
        confidence += 0.15
        data_points += len(declared)
    if skills.verified_skills:
        confidence += 0.15
        data_points += len(skills.verified_skills)
    if skills.repo_languages or skills.repo_topics:
        confidence += 0.15
        data_points += len(skills.repo_languages) + len(skills.repo_topics)

    if execution.completed_projects:
        confidence += 0.20
        data_points += len(execution.completed_projects)
    elif execution.active_projects:
        confidence += 0.10
        data_points += len(execution.active_projects)

    if social.endorsements:
        confidence += 0.10
        data_points += len(social.endorsements)
    if social.unique_collaborators:
        confidence += 0.05
        data_points += len(social.unique_collaborators)

    if data.consistency.activity_log:
        confidence += 0.10
        data_points += len(data.consistency.activity_log)

    if execution.has_portfolio:
        confidence += 0.05
        data_points += 1

    if days_since(data.reliability.account_created_at, now) > 7:
        confidence += 0.05

    multiplier = min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, confidence))
    return ConfidenceResult(multiplier=round(multiplier, 2), data_points=data_points)


def compute_credibility_score(
    data: CredibilityInput, now: datetime | None = None,
) -> CredibilityScoreBreakdown:
    """Compute the full, explainable credibility score for a user."""
    now = now or datetime.now(UTC)

    pillars = PillarBreakdowns(
        skill_evidence=compute_skill_evidence(data.skill_evidence),
        execution_proof=compute_execution_proof(data.execution_proof),
        social_validation=compute_social_validation(data.social_validation),
        reliability=compute_reliability(data.reliability, now),
        consistency=compute_consistency(data.consistency),
    )

    weighted = (
        pillars.skill_evidence.score * CREDIBILITY_WEIGHTS["skill_evidence"]
        + pillars.execution_proof.score * CREDIBILITY_WEIGHTS["execution_proof"]
        + pillars.social_validation.score * CREDIBILITY_WEIGHTS["social_validation"]
        + pillars.reliability.score * CREDIBILITY_WEIGHTS["reliability"]
        + pillars.consistency.score * CREDIBILITY_WEIGHTS["consistency"]
    )
    credibility_score = clamp_score(weighted)

    confidence = compute_confidence_multiplier(data, now)
    final_rank_score = clamp_score(credibility_score * confidence.multiplier)

    # execution signals first
    all_signals = [
        *pillars.execution_proof.signals,
        *pillars.skill_evidence.signals,
        *pillars.reliability.signals,
        *pillars.social_validation.signals,
        *pillars.consistency.signals,
    ]

    return CredibilityScoreBreakdown(
        credibility_score=credibility_score,
        confidence_multiplier=confidence.multiplier,
        final_rank_score=final_rank_score,
        data_points_count=confidence.data_points,
        pillars=pillars,
        label=credibility_label(final_rank_score),
        top_signals=all_signals[:MAX_TOP_SIGNALS],
        computed_at=now.isoformat(),
    )


def get_credibility_summary(
    data: CredibilityInput, now: datetime | None = None,
) -> CredibilitySummary:
    return compute_credibility_score(data, now).summary()


def compute_baseline_credibility(now: datetime | None = None) -> CredibilityScoreBreakdown:
    """Score a user with no data at all; never raises."""
    return compute_credibility_score(CredibilityInput.empty(now=now), now)
