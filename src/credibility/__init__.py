"""Credibility scoring engine, cache and data service."""

from src.credibility.cache import (
    CacheEntry,
    CacheWriteError,
    CredibilityCache,
    InMemoryCredibilityCache,
    SQLiteCredibilityCache,
)
from src.credibility.engine import (
    CREDIBILITY_WEIGHTS,
    compute_baseline_credibility,
    compute_confidence_multiplier,
    compute_credibility_score,
    get_credibility_summary,
)
from src.credibility.models import CredibilityInput, CredibilityScoreBreakdown
from src.credibility.service import CredibilityService, ProfileNotFoundError

__all__ = [
    "CREDIBILITY_WEIGHTS",
    "CacheEntry",
    "CacheWriteError",
    "CredibilityCache",
    "CredibilityInput",
    "CredibilityScoreBreakdown",
    "CredibilityService",
    "InMemoryCredibilityCache",
    "ProfileNotFoundError",
    "SQLiteCredibilityCache",
    "compute_baseline_credibility",
    "compute_confidence_multiplier",
    "compute_credibility_score",
    "get_credibility_summary",
]
