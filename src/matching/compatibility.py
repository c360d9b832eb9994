"""Pairwise compatibility between one user and one target."""

from __future__ import annotations

from src.matching.models import (
    COMPATIBILITY_WEIGHTS,
    MatchScore,
    MatchScoreDetails,
    MatchTarget,
    MatchUser,
)
from src.matching.scoring import (
    calculate_availability_score,
    calculate_complementary_score,
    calculate_skill_overlap,
    calculate_timezone_score,
)
from src.scoring import clamp_score, match_label


def calculate_compatibility(user: MatchUser, target: MatchTarget) -> MatchScore:
    overlap = calculate_skill_overlap(user.skills, target.required_skills)
    complementary = calculate_complementary_score(user.skills, target.required_skills)
    availability = calculate_availability_score(user.availability, target.availability_required)
    timezone = calculate_timezone_score(user.timezone, target.timezone_preferred)

    score = clamp_score(
        overlap.score * COMPATIBILITY_WEIGHTS["skill_overlap"]
        + complementary * COMPATIBILITY_WEIGHTS["complementary"]
        + availability * COMPATIBILITY_WEIGHTS["availability"]
        + timezone * COMPATIBILITY_WEIGHTS["timezone"]
    )

    return MatchScore(
        target_id=target.id,
        score=score,
        label=match_label(score),
        details=MatchScoreDetails(
            skill_overlap=overlap.score,
            complementary_score=complementary,
            availability_score=availability,
            timezone_score=timezone,
            missing_skills=overlap.missing,
        ),
    )
