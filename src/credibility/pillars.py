"""Credibility pillar scorers.

Each pillar is an independent, pure function returning a 0-100 score
with an explainable breakdown:

- compute_skill_evidence (25%)
- compute_execution_proof (30%)
- compute_social_validation (15%)
- compute_reliability (20%)
- compute_consistency (10%)

None of them performs I/O. Scorers that depend on the current time take
an optional ``now`` so results can be reproduced.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime

from src.credibility.models import (
    ConsistencyBreakdown,
    ConsistencyInput,
    ExecutionProofBreakdown,
    ExecutionProofInput,
    ReliabilityBreakdown,
    ReliabilityInput,
    SkillEvidenceBreakdown,
    SkillEvidenceInput,
    SocialValidationBreakdown,
    SocialValidationInput,
)
from src.models import ProficiencyLevel, ProjectRole, VerificationType
from src.scoring import clamp_score, round_half_up

VERIFICATION_CONFIDENCE: dict[VerificationType, float] = {
    VerificationType.SELF_DECLARED: 0.3,
    VerificationType.QUIZ_PASSED: 0.8,
    VerificationType.PEER_VERIFIED: 0.6,
    VerificationType.PROJECT_PROVEN: 0.9,
    VerificationType.REPO_VERIFIED: 0.7,
}

PROFICIENCY_MULTIPLIER: dict[ProficiencyLevel, float] = {
    ProficiencyLevel.BEGINNER: 0.4,
    ProficiencyLevel.INTERMEDIATE: 0.6,
    ProficiencyLevel.ADVANCED: 0.85,
    ProficiencyLevel.EXPERT: 1.0,
}

# Self-declared skills only count for half their weight
DECLARED_SKILL_DECAY = 0.5

# Points for the 1st, 2nd and 3rd completed project; every later one earns the tail value
COMPLETION_SCHEDULE = (15, 12, 8)
COMPLETION_TAIL = 5

HIGH_CREDIBILITY_ENDORSER = 60

SECONDS_PER_DAY = 86_400


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def days_since(moment: datetime, now: datetime | None = None) -> float:
    """Whole-and-fractional days elapsed since ``moment``, never negative."""
    reference = _as_utc(now) if now else datetime.now(UTC)
    return max(0.0, (reference - _as_utc(moment)).total_seconds() / SECONDS_PER_DAY)


def unique_skills(items: list[str]) -> list[str]:
    """Lowercased, stripped skill names with blanks and duplicates removed."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        key = item.strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(key)
    return result


# --- Pillar 1: Skill Evidence ---


def compute_skill_evidence(data: SkillEvidenceInput) -> SkillEvidenceBreakdown:
    signals: list[str] = []
    declared = unique_skills(data.declared_skills)
    declared_count = len(declared)

    declared_score = 0.0
    if declared_count > 0:
        # capped at 8 skills
        declared_score = min(declared_count, 8) / 8 * 40 * DECLARED_SKILL_DECAY
        signals.append(_plural(declared_count, "self-declared skill"))

    verified_count = len(data.verified_skills)
    verification_bonus = 0.0
    if verified_count > 0:
        for verified in data.verified_skills:
            verification_bonus += (
                VERIFICATION_CONFIDENCE[verified.type]
                * PROFICIENCY_MULTIPLIER[verified.proficiency]
                * 12
            )
        verification_bonus = min(45.0, verification_bonus)
        signals.append(
            f"{_plural(verified_count, 'verified skill')} "
            f"(+{round_half_up(verification_bonus)} pts)"
        )

    lang_count = len(data.repo_languages)
    topic_count = len(data.repo_topics)
    repo_score = 0.0
    if lang_count > 0:
        repo_score += min(10, lang_count) * 1.5
        signals.append(f"{_plural(lang_count, 'repository language')} detected")
    if topic_count > 0:
        repo_score += min(8, topic_count) * 1.0
        signals.append(f"{_plural(topic_count, 'repository topic')} found")
    repo_score = min(25.0, repo_score)

    verified_names = {v.skill.strip().lower() for v in data.verified_skills}
    unverified_count = sum(1 for skill in declared if skill not in verified_names)
    confidence_decay = min(15, unverified_count * 2)
    if confidence_decay > 0:
        signals.append(
            f"-{confidence_decay} pts: {_plural(unverified_count, 'unverified skill')}"
        )

    score = clamp_score(declared_score + verification_bonus + repo_score - confidence_decay)

    return SkillEvidenceBreakdown(
        score=score,
        declared_count=declared_count,
        declared_score=round_half_up(declared_score),
        verified_count=verified_count,
        verification_bonus=round_half_up(verification_bonus),
        repo_signal_count=lang_count + topic_count,
        repo_score=round_half_up(repo_score),
        confidence_decay=confidence_decay,
        signals=signals,
    )


# --- Pillar 2: Execution Proof ---


def completion_points(completed_count: int) -> int:
    """Diminishing-returns points for ``completed_count`` finished projects, capped at 40."""
    total = 0
    for index in range(completed_count):
        total += COMPLETION_SCHEDULE[index] if index < len(COMPLETION_SCHEDULE) else COMPLETION_TAIL
        if total >= 40:
            break
    return min(40, total)


def compute_execution_proof(data: ExecutionProofInput) -> ExecutionProofBreakdown:
    signals: list[str] = []
    completed_count = len(data.completed_projects)
    active_count = len(data.active_projects)
    leader_count = sum(1 for p in data.all_projects if p.role == ProjectRole.LEADER)
    member_count = sum(1 for p in data.all_projects if p.role == ProjectRole.MEMBER)

    completion_score = completion_points(completed_count)
    if completed_count > 0:
        signals.append(
            f"{_plural(completed_count, 'completed project')} (+{completion_score} pts)"
        )

    active_score = min(10, active_count * 5)
    if active_count > 0:
        signals.append(_plural(active_count, "active project"))

    role_bonus = 0
    if leader_count > 0:
        role_bonus = min(20, leader_count * 7)
        signals.append(f"Led {_plural(leader_count, 'project')} (+{role_bonus} pts)")
    if member_count > 0:
        role_bonus += min(10, member_count * 3)
    role_bonus = min(25, role_bonus)

    avg_complexity = 0
    if completed_count > 0:
        complexities = [
            min(100, min(30, len(p.required_skills) * 6) + min(30, (p.team_size or 1) * 5))
            for p in data.completed_projects
        ]
        avg_complexity = round_half_up(sum(complexities) / len(complexities))
    complexity_score = min(15, round_half_up(avg_complexity * 0.15))

    portfolio_bonus = 10 if data.has_portfolio else 0
    if data.has_portfolio:
        signals.append("Portfolio link provided (+10 pts)")

    score = clamp_score(
        completion_score + active_score + role_bonus + complexity_score + portfolio_bonus
    )

    return ExecutionProofBreakdown(
        score=score,
        completed_count=completed_count,
        completion_score=completion_score,
        active_score=active_score,
        leader_count=leader_count,
        role_bonus=role_bonus,
        avg_complexity=avg_complexity,
        complexity_score=complexity_score,
        portfolio_bonus=portfolio_bonus,
        signals=signals,
    )


# --- Pillar 3: Social Validation ---


def endorser_points(unique_endorsers: int) -> int:
    """Tiered points: 8 each for the first 5 endorsers, 4 for the next 5, then 2; capped at 50."""
    total = 0
    for index in range(unique_endorsers):
        if index < 5:
            total += 8
        elif index < 10:
            total += 4
        else:
            total += 2
        if total >= 50:
            break
    return min(50, total)


def compute_social_validation(data: SocialValidationInput) -> SocialValidationBreakdown:
    signals: list[str] = []
    endorsement_count = len(data.endorsements)
    unique_endorsers = len({e.endorser_id for e in data.endorsements})
    diminishing_returns = unique_endorsers > 5

    endorsement_score = endorser_points(unique_endorsers)
    if endorsement_count > 0:
        signals.append(
            f"{_plural(endorsement_count, 'endorsement')} from "
            f"{_plural(unique_endorsers, 'unique peer')}"
        )
    if diminishing_returns:
        signals.append("Endorsement diminishing returns applied")

    credible = sum(
        1 for e in data.endorsements
        if (e.endorser_credibility or 0) >= HIGH_CREDIBILITY_ENDORSER
    )
    endorser_quality_bonus = 0
    if credible > 0:
        endorser_quality_bonus = min(15, credible * 5)
        signals.append(
            f"{_plural(credible, 'endorsement')} from credible users "
            f"(+{endorser_quality_bonus} pts)"
        )

    collaborator_score = 0
    if data.repeat_collaborators > 0:
        collaborator_score = min(20, data.repeat_collaborators * 7)
        signals.append(
            f"{_plural(data.repeat_collaborators, 'repeat collaborator')} "
            f"(+{collaborator_score} pts)"
        )

    collaborator_count = len(data.unique_collaborators)
    collaborator_diversity = min(15, collaborator_count * 3)
    if collaborator_count > 0:
        signals.append(f"Worked with {_plural(collaborator_count, 'unique collaborator')}")

    score = clamp_score(
        endorsement_score + endorser_quality_bonus + collaborator_score + collaborator_diversity
    )

    return SocialValidationBreakdown(
        score=score,
        endorsement_count=endorsement_count,
        unique_endorsers=unique_endorsers,
        endorsement_score=endorsement_score,
        endorser_quality_bonus=endorser_quality_bonus,
        repeat_collaborator_count=data.repeat_collaborators,
        collaborator_score=collaborator_score,
        collaborator_diversity=collaborator_diversity,
        diminishing_returns=diminishing_returns,
        signals=signals,
    )


# --- Pillar 4: Reliability ---


def recency_points(days_inactive: float) -> int:
    if days_inactive <= 1:
        return 20
    if days_inactive <= 7:
        return 15
    if days_inactive <= 14:
        return 10
    if days_inactive <= 30:
        return 5
    return 0


def compute_reliability(
    data: ReliabilityInput, now: datetime | None = None,
) -> ReliabilityBreakdown:
    signals: list[str] = []

    if data.total_projects_joined > 0:
        completion_rate = round_half_up(
            data.projects_completed / data.total_projects_joined * 100
        )
    else:
        completion_rate = 50  # neutral for new users
    completion_score = round_half_up(completion_rate * 0.4)
    signals.append(f"Project completion rate: {completion_rate}%")

    invite_response_rate = 100
    invite_actions = data.invites_accepted + data.invites_rejected + data.invites_ignored
    if data.invites_received > 0 and invite_actions > 0:
        responded = data.invites_accepted + data.invites_rejected
        invite_response_rate = round_half_up(responded / data.invites_received * 100)
    response_score = round_half_up(invite_response_rate * 0.2)
    if data.invites_received > 0:
        signals.append(f"Invite response rate: {invite_response_rate}%")

    dropout_penalty = 0
    if data.projects_abandoned > 0:
        dropout_penalty = min(30, data.projects_abandoned * 10)
        signals.append(
            f"-{dropout_penalty} pts: "
            f"{_plural(data.projects_abandoned, 'abandoned project')}"
        )

    recency_bonus = 0
    inactivity_penalty = 0
    if data.last_active_at is not None:
        days_inactive = days_since(data.last_active_at, now)
        recency_bonus = recency_points(days_inactive)
        if recency_bonus > 0:
            when = "today" if days_inactive <= 1 else f"{round_half_up(days_inactive)} days ago"
            signals.append(f"Active {when} (+{recency_bonus})")
        if days_inactive > 60:
            inactivity_penalty = min(20, round_half_up((days_inactive - 60) * 0.3))
            signals.append(
                f"-{inactivity_penalty} pts: inactive for {round_half_up(days_inactive)} days"
            )
    elif days_since(data.account_created_at, now) > 7:
        inactivity_penalty = 10
        signals.append("-10 pts: no recorded activity")

    score = clamp_score(
        completion_score + response_score + recency_bonus - dropout_penalty - inactivity_penalty
    )

    return ReliabilityBreakdown(
        score=score,
        completion_rate=completion_rate,
        invite_response_rate=invite_response_rate,
        dropout_penalty=dropout_penalty,
        recency_bonus=recency_bonus,
        inactivity_penalty=inactivity_penalty,
        signals=signals,
    )


# --- Pillar 5: Consistency ---


def longest_monthly_streak(months: set[tuple[int, int]]) -> int:
    """Length of the longest run of consecutive calendar months."""
    if not months:
        return 0
    ordered = sorted(year * 12 + (month - 1) for year, month in months)
    longest = current = 1
    for previous, current_index in zip(ordered, ordered[1:]):
        if current_index == previous + 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def compute_consistency(data: ConsistencyInput) -> ConsistencyBreakdown:
    signals: list[str] = []
    total_months = max(1, math.ceil(data.account_age_days / 30))

    months = {(_as_utc(a.date).year, _as_utc(a.date).month) for a in data.activity_log}
    active_months = len(months)

    activity_ratio = min(1.0, active_months / total_months)
    ratio_score = round_half_up(activity_ratio * 40)
    signals.append(
        f"Active in {active_months}/{total_months} month{'' if total_months == 1 else 's'}"
    )

    max_streak = longest_monthly_streak(months)
    steadiness_bonus = 0
    if active_months >= 3:
        steadiness_bonus = min(30, max_streak * 6)
        if max_streak >= 3:
            signals.append(f"{max_streak}-month activity streak (+{steadiness_bonus} pts)")

    entries = len(data.activity_log)
    burst_penalty = 0
    if active_months <= 2 and entries > 10 and total_months > 3:
        burst_penalty = min(20, round_half_up(entries / active_months * 0.5))
        signals.append(f"-{burst_penalty} pts: burst activity pattern")

    skill_consistency = 15
    if data.skill_changes > 5:
        skill_consistency = max(0, 15 - (data.skill_changes - 5) * 3)
        if data.skill_changes > 8:
            signals.append(f"Frequent skill changes (-{15 - skill_consistency} pts)")

    age_bonus = min(15, round_half_up(total_months * 1.5))

    score = clamp_score(
        ratio_score + steadiness_bonus + skill_consistency + age_bonus - burst_penalty
    )

    return ConsistencyBreakdown(
        score=score,
        active_months=active_months,
        total_months=total_months,
        activity_ratio=round(activity_ratio, 2),
        max_streak=max_streak,
        steadiness_bonus=steadiness_bonus,
        burst_penalty=burst_penalty,
        skill_consistency=skill_consistency,
        age_bonus=age_bonus,
        signals=signals,
    )
