"""Pairwise compatibility and candidate ranking."""

from src.matching.compatibility import calculate_compatibility
from src.matching.models import (
    COMPATIBILITY_WEIGHTS,
    TEAMMATE_WEIGHTS,
    TEAMMATE_WEIGHTS_WITH_CREDIBILITY,
    MatchCandidate,
    MatchingEngineInput,
    MatchResult,
    MatchScore,
    MatchScoreDetails,
    MatchTarget,
    MatchUser,
    TeammateMatchDetails,
)
from src.matching.teammate_engine import extract_keywords, rank_candidates, score_candidate

__all__ = [
    "COMPATIBILITY_WEIGHTS",
    "TEAMMATE_WEIGHTS",
    "TEAMMATE_WEIGHTS_WITH_CREDIBILITY",
    "MatchCandidate",
    "MatchResult",
    "MatchScore",
    "MatchScoreDetails",
    "MatchTarget",
    "MatchUser",
    "MatchingEngineInput",
    "TeammateMatchDetails",
    "calculate_compatibility",
    "extract_keywords",
    "rank_candidates",
    "score_candidate",
]
