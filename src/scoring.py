"""Numeric helpers shared by the credibility and matching engines."""

from __future__ import annotations

import math

from src.models import CredibilityLabel, MatchLabel


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    """Round then clamp a score into [low, high]."""
    return min(high, max(low, round_half_up(value)))


def credibility_label(score: int) -> CredibilityLabel:
    if score >= 80:
        return CredibilityLabel.ELITE
    if score >= 60:
        return CredibilityLabel.TRUSTED
    if score >= 40:
        return CredibilityLabel.PROMISING
    if score >= 20:
        return CredibilityLabel.EMERGING
    return CredibilityLabel.NEW


def match_label(score: int) -> MatchLabel:
    if score >= 75:
        return MatchLabel.EXCELLENT
    if score >= 50:
        return MatchLabel.GOOD
    if score >= 25:
        return MatchLabel.FAIR
    return MatchLabel.LOW
