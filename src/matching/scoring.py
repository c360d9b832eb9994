"""Deterministic sub-scores shared by compatibility and candidate ranking.

All functions are pure and return integers in [0, 100].
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from src.scoring import round_half_up

# Required skill -> skills that count as adjacent experience
SKILL_RELATIONSHIPS: dict[str, tuple[str, ...]] = {
    "react": ("typescript", "javascript", "redux", "react-query", "nextjs", "vite", "tailwind", "css"),
    "vue": ("typescript", "javascript", "vuex", "nuxt", "css"),
    "angular": ("typescript", "javascript", "rxjs", "ngrx"),
    "typescript": ("javascript", "react", "node", "express", "nestjs"),
    "javascript": ("typescript", "react", "vue", "angular", "node", "express"),
    "python": ("django", "fastapi", "flask", "ml", "ai", "tensorflow", "pytorch", "pandas", "numpy"),
    "machine learning": ("python", "tensorflow", "pytorch", "scikit-learn", "data science", "ai"),
    "ai": ("python", "machine learning", "tensorflow", "pytorch", "nlp"),
    "node": ("javascript", "typescript", "express", "nestjs", "mongodb"),
    "express": ("node", "javascript", "typescript", "mongodb", "postgresql"),
    "postgresql": ("sql", "node", "python", "supabase", "prisma"),
    "mongodb": ("node", "javascript", "express", "mongoose"),
    "rust": ("systems programming", "webassembly", "c++"),
    "go": ("microservices", "docker", "kubernetes", "backend"),
    "docker": ("kubernetes", "devops", "ci/cd", "linux"),
    "kubernetes": ("docker", "devops", "cloud", "aws", "gcp"),
    "design": ("figma", "ui/ux", "css", "tailwind", "sketch"),
    "figma": ("design", "ui/ux", "prototyping"),
}

RELATED_SKILL_POINTS = 20
MAX_RELATED_CREDIT = 60

AVAILABILITY_RANK: dict[str, int] = {
    "full-time": 4,
    "part-time": 3,
    "weekends": 2,
    "evenings": 1,
}
UNKNOWN_AVAILABILITY_RANK = 2

_UTC_OFFSET_RE = re.compile(r"UTC([+-])(\d+):(\d+)")


@dataclass
class SkillOverlap:
    score: int
    matched: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def _normalize(skills: list[str]) -> set[str]:
    return {s.strip().lower() for s in skills if s and s.strip()}


def calculate_skill_overlap(user_skills: list[str], required_skills: list[str]) -> SkillOverlap:
    """Percentage of required skills the user has.

    Matched and missing lists keep the required skills' original spelling.
    """
    if not required_skills:
        return SkillOverlap(score=100)
    if not user_skills:
        return SkillOverlap(score=0, missing=list(required_skills))

    user_set = _normalize(user_skills)
    matched: list[str] = []
    missing: list[str] = []
    for skill in required_skills:
        if skill.strip().lower() in user_set:
            matched.append(skill)
        else:
            missing.append(skill)

    score = round_half_up(len(matched) / len(required_skills) * 100)
    return SkillOverlap(score=score, matched=matched, missing=missing)


def calculate_complementary_score(user_skills: list[str], required_skills: list[str]) -> int:
    """Credit for adjacent skills where a required skill is missing.

    A direct match is worth 100 for that skill; otherwise each related skill
    the user has is worth 20, capped at 60. The result is the average across
    required skills.
    """
    if not required_skills:
        return 100
    if not user_skills:
        return 0

    user_set = _normalize(user_skills)
    required = [s.strip().lower() for s in required_skills]

    total = 0
    for skill in required:
        if skill in user_set:
            total += 100
            continue
        related = [r for r in SKILL_RELATIONSHIPS.get(skill, ()) if r in user_set]
        if related:
            total += min(MAX_RELATED_CREDIT, len(related) * RELATED_SKILL_POINTS)

    return round_half_up(total / len(required))


def calculate_availability_score(
    user_availability: str | None, target_availability: str | None,
) -> int:
    if not user_availability or not target_availability:
        return 100

    user_rank = AVAILABILITY_RANK.get(user_availability.lower(), UNKNOWN_AVAILABILITY_RANK)
    target_rank = AVAILABILITY_RANK.get(target_availability.lower(), UNKNOWN_AVAILABILITY_RANK)

    if user_rank >= target_rank:
        return 100
    if user_rank == target_rank - 1:
        return 70
    return 40


def parse_utc_offset(tz: str) -> float:
    """Hours east of UTC for a ``UTC+H:MM`` string; 0 when unparseable."""
    match = _UTC_OFFSET_RE.search(tz)
    if not match:
        return 0.0
    sign = 1 if match.group(1) == "+" else -1
    return sign * (int(match.group(2)) + int(match.group(3)) / 60)


def calculate_timezone_score(user_timezone: str | None, target_timezone: str | None) -> int:
    if not user_timezone or not target_timezone:
        return 100
    if user_timezone == target_timezone:
        return 100

    diff = abs(parse_utc_offset(user_timezone) - parse_utc_offset(target_timezone))
    if diff <= 2:
        return 100
    if diff <= 5:
        return 75
    if diff <= 8:
        return 50
    return 25
