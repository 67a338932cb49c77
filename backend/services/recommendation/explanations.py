"""Explanation generator: sub-scores -> short human-readable reasons.

Template-based and deterministic: the same sub-scores always produce the
same sentences in the same order. Also builds the "areas of improvement"
tips shown next to job recommendations.
"""

import logging
from collections.abc import Callable

from models.schemas.features import EXPERIENCE_LEVELS, CandidateFeatureSet, SeekerFeatureSet
from models.schemas.match_result import SubScore

logger = logging.getLogger(__name__)

MAX_REASONS = 5
MIN_REASON_VALUE = 0.3
MAX_TIPS = 5
MIN_BIO_LENGTH = 50
MIN_PROFILE_SKILLS = 3


def _join(items: list[str], limit: int = 3) -> str:
    return ", ".join(items[:limit])


def _skills_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    d = sub.details
    if candidate.kind == "job":
        if sub.neutral:
            return "No specific skills are listed for this role"
        matched = d.get("matched", [])
        sentence = f"You have {len(matched)} of {d.get('required', 0)} required skills"
        return f"{sentence}: {_join(matched)}" if matched else sentence
    if sub.neutral:
        return "General course open to any skill set"
    taught = d.get("taught", [])
    if not taught:
        return "Builds on skills you already have"
    if d.get("basis") == "gap":
        return f"Teaches skills you are missing: {_join(taught)}"
    return f"Will help you learn: {_join(taught)}"


def _experience_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    d = sub.details
    if sub.neutral:
        return "Open to all experience levels"
    level = d.get("seeker_level")
    if candidate.kind == "resource":
        if d.get("distance") == 0:
            return f"Right difficulty for your {level} level"
        return "Suitable difficulty for your experience"
    if d.get("distance") == 0:
        return f"Matches your {level} experience level"
    return f"Close to your experience level ({d.get('candidate_level')} role)"


def _location_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    d = sub.details
    if sub.neutral:
        return "No location constraints"
    if d.get("city"):
        return f"Matches your preferred location: {d['city'].title()}"
    if d.get("remote"):
        return "Remote role that fits your work preference"
    if d.get("mode") == "hybrid":
        return "Hybrid role with partial remote work"
    return f"Located in {str(d.get('location', 'another city')).title()}"


def _salary_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    d = sub.details
    if sub.neutral:
        return "Salary not specified"
    band = f"{d['offered_min']:,}-{d['offered_max']:,} {d.get('currency', '')}".strip()
    if sub.value >= 0.99:
        return f"Salary range fits your expectation ({band})"
    return f"Salary range partly overlaps your expectation ({band})"


def _category_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    d = sub.details
    if sub.neutral:
        return "Open category"
    if sub.value >= 1.0:
        return f"Matches your interest in {d['category']}"
    if d.get("interest"):
        return f"Related to your interest in {d['interest']}"
    return f"Outside your usual categories ({d.get('category')})"


def _recency_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    d = sub.details
    if d.get("evergreen"):
        return "Evergreen content you can start anytime"
    if d.get("expired"):
        return "Application deadline has passed"
    if sub.neutral:
        return "Recently listed"
    days = d.get("days_since_posted", 0)
    if days == 0:
        return "Posted today"
    return f"Posted {days} day{'s' if days != 1 else ''} ago"


def _keyword_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    keywords = sub.details.get("keywords", [])
    if not keywords:
        return "Posting text does not mention your bio keywords"
    return f"Mentions keywords from your bio: {_join(keywords)}"


def _gap_coverage_reason(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    d = sub.details
    if not d.get("covered"):
        return "Does not cover your most common skill gaps"
    frequency = d.get("frequency", 0)
    noun = "job" if frequency == 1 else "jobs"
    return f"Covers {d['top_skill']}, a skill missing for {frequency} {noun} that match you"


_TEMPLATES: dict[str, Callable[[SubScore, CandidateFeatureSet], str]] = {
    "skills": _skills_reason,
    "experience": _experience_reason,
    "location": _location_reason,
    "salary": _salary_reason,
    "category": _category_reason,
    "recency": _recency_reason,
    "keyword": _keyword_reason,
    "gap_coverage": _gap_coverage_reason,
}


def describe(sub: SubScore, candidate: CandidateFeatureSet) -> str:
    """Templated sentence for one sub-score."""
    return _TEMPLATES[sub.dimension](sub, candidate)


def explain(
    sub_scores: list[SubScore],
    candidate: CandidateFeatureSet,
    max_reasons: int = MAX_REASONS,
    min_value: float = MIN_REASON_VALUE,
) -> list[str]:
    """Reasons ordered by contribution, skipping weak and unspecified dimensions.

    A dimension is weak when its value (not its weighted contribution) is
    below ``min_value``; the orchestrator passes the
    ``explanation_min_value`` setting, which defaults to
    ``MIN_REASON_VALUE``. Never returns an empty list for a positive score:
    when no sub-score clears the cut-off, the top contributor is described
    anyway.
    """
    ordered = sorted(sub_scores, key=lambda s: (-s.contribution, s.dimension))
    reasons: list[str] = []
    for sub in ordered:
        if len(reasons) >= max_reasons:
            break
        if sub.neutral or sub.contribution <= 0 or sub.value < min_value:
            continue
        sentence = describe(sub, candidate)
        if sentence not in reasons:
            reasons.append(sentence)

    if not reasons and ordered and ordered[0].contribution > 0:
        reasons.append(describe(ordered[0], candidate))
    return reasons


def improvement_tips(
    seeker: SeekerFeatureSet,
    candidate: CandidateFeatureSet,
    skills_gap: list[str],
    limit: int = MAX_TIPS,
) -> list[str]:
    """What the seeker could change to become a stronger match for a job."""
    if candidate.kind != "job":
        return []

    tips: list[str] = []
    if skills_gap:
        tips.append(f"Add these skills to your profile: {_join(skills_gap)}")

    if candidate.experience_level is not None:
        seeker_idx = EXPERIENCE_LEVELS.index(seeker.experience_level)
        job_idx = EXPERIENCE_LEVELS.index(candidate.experience_level)
        years = seeker.experience_months / 12
        if seeker_idx < job_idx:
            tips.append(
                f"Gain more experience for {candidate.experience_level}-level roles "
                f"(currently {years:.1f} years)"
            )
        elif job_idx == 0 and seeker_idx >= 2:
            tips.append("Consider highlighting your willingness to take entry-level roles")

    missing_preferred = sorted(candidate.preferred_skills - seeker.skills)
    if missing_preferred:
        tips.append(f"Nice to have for this role: {_join(missing_preferred)}")

    if seeker.bio_length < MIN_BIO_LENGTH:
        tips.append(f"Complete your profile bio (at least {MIN_BIO_LENGTH} characters)")
    if len(seeker.skills) < MIN_PROFILE_SKILLS:
        tips.append("Add more skills to your profile (at least 3-5 relevant skills)")
    if not seeker.has_work_history:
        tips.append("Add work experience to your profile")

    return tips[:limit]
