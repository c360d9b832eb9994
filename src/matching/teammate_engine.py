"""Teammate ranking engine.

Scores candidates against a target's required skills and keywords:
- Skill overlap: direct match against declared and repository-derived skills
- Repository languages: required skills found among primary languages
- Repository relevance: target keywords found in repository names
- Complementary skills: adjacent experience from the relationship table
- Credibility: the candidate's final rank score, when one is attached

All functions are pure; enrichment happens before ranking.
"""

from __future__ import annotations

import re

from src.matching.models import (
    TEAMMATE_WEIGHTS,
    TEAMMATE_WEIGHTS_WITH_CREDIBILITY,
    MatchCandidate,
    MatchingEngineInput,
    MatchResult,
    TeammateMatchDetails,
)
from src.matching.scoring import calculate_complementary_score, calculate_skill_overlap
from src.scoring import clamp_score, match_label, round_half_up

MAX_KEYWORDS = 20
MIN_KEYWORD_LENGTH = 3
REPO_MATCH_POINTS = 20
LANGUAGE_OVERLAP_POINTS = 85
MAX_DIVERSITY_BONUS = 15

STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "shall", "can", "need", "dare", "ought",
    "used", "to", "of", "in", "for", "on", "with", "at", "by", "from",
    "as", "into", "through", "during", "before", "after", "above", "below",
    "between", "out", "off", "over", "under", "again", "further", "then",
    "and", "but", "or", "nor", "not", "so", "yet", "both", "either",
    "neither", "each", "every", "all", "any", "few", "more", "most",
    "other", "some", "such", "no", "only", "own", "same", "than", "too",
    "very", "just", "because", "also", "this", "that", "these", "those",
    "it", "its", "we", "our", "you", "your", "they", "their", "them",
    "i", "me", "my", "he", "she", "him", "her", "his", "hers", "who",
    "which", "what", "where", "when", "how", "why", "project", "team",
    "build", "create", "using", "use", "want", "looking", "help",
})

_NON_KEYWORD_CHARS = re.compile(r"[^a-z0-9\s\-+#]")


def extract_keywords(text: str) -> list[str]:
    """Lowercased, order-preserving keywords with stop words removed."""
    cleaned = _NON_KEYWORD_CHARS.sub(" ", (text or "").lower())
    words = [
        w for w in cleaned.split()
        if len(w) >= MIN_KEYWORD_LENGTH and w not in STOP_WORDS
    ]
    return words[:MAX_KEYWORDS]


def effective_skills(candidate: MatchCandidate) -> list[str]:
    """Declared skills, repo topics and repo languages, case-folded and deduplicated."""
    combined = [
        *candidate.skills,
        *candidate.repo_topics,
        *candidate.repo_languages,
    ]
    seen: dict[str, None] = {}
    for skill in combined:
        key = skill.strip().lower()
        if key:
            seen.setdefault(key, None)
    return list(seen)


def repo_language_score(languages: dict[str, int], required_skills: list[str]) -> int:
    if not languages:
        return 0
    if not required_skills:
        return 50

    names = {lang.lower() for lang in languages}
    matches = sum(1 for skill in required_skills if skill.lower() in names)
    overlap = matches / len(required_skills) * LANGUAGE_OVERLAP_POINTS
    diversity = min(MAX_DIVERSITY_BONUS, len(languages) * 2)
    return min(100, round_half_up(overlap + diversity))


def repo_relevance_score(repo_names: list[str], keywords: list[str]) -> int:
    if not repo_names:
        return 0
    if not keywords:
        return 50

    lowered = [k.lower() for k in keywords if len(k) >= MIN_KEYWORD_LENGTH]
    matches = 0
    for name in repo_names:
        name = name.lower()
        matches += sum(1 for keyword in lowered if keyword in name)
    return min(100, matches * REPO_MATCH_POINTS)


def match_confidence(candidate: MatchCandidate) -> float:
    """How much data backs the score, from 0 to 1."""
    confidence = 0.0
    if candidate.github_username:
        confidence += 0.3
    if candidate.skills:
        confidence += 0.5
    if candidate.repo_topics:
        confidence += 0.2
    return round(confidence, 2)


def score_candidate(candidate: MatchCandidate, engine_input: MatchingEngineInput) -> MatchResult:
    """Score one candidate against the target's requirements."""
    skills = effective_skills(candidate)
    required = engine_input.required_skills

    overlap = calculate_skill_overlap(skills, required)
    language = repo_language_score(candidate.repo_languages, required)
    relevance = repo_relevance_score(candidate.repo_names, engine_input.keywords)
    complementary = calculate_complementary_score(skills, required)

    credibility_score = None
    if candidate.credibility is not None:
        credibility_score = candidate.credibility.final_rank_score
        weights = TEAMMATE_WEIGHTS_WITH_CREDIBILITY
        weighted = (
            overlap.score * weights["skill_overlap"]
            + language * weights["github_language"]
            + relevance * weights["repo_relevance"]
            + complementary * weights["complementary"]
            + credibility_score * weights["credibility"]
        )
    else:
        weights = TEAMMATE_WEIGHTS
        weighted = (
            overlap.score * weights["skill_overlap"]
            + language * weights["github_language"]
            + relevance * weights["repo_relevance"]
            + complementary * weights["complementary"]
        )

    score = clamp_score(weighted)
    return MatchResult(
        user_id=candidate.id,
        score=score,
        confidence=match_confidence(candidate),
        label=match_label(score),
        matched_skills=overlap.matched,
        details=TeammateMatchDetails(
            skill_overlap_score=overlap.score,
            repo_language_score=language,
            repo_relevance_score=relevance,
            complementary_score=complementary,
            credibility_score=credibility_score,
            missing_skills=overlap.missing,
        ),
        credibility=candidate.credibility,
    )


def rank_candidates(
    candidates: list[MatchCandidate], engine_input: MatchingEngineInput,
) -> list[MatchResult]:
    """Score every candidate and sort by score, then confidence, descending.

    The sort is stable, so fully tied candidates keep their input order.
    """
    results = [score_candidate(c, engine_input) for c in candidates]
    return sorted(results, key=lambda r: (-r.score, -r.confidence))
