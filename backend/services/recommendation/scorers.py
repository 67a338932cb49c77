"""Component scorers: one [0, 1] sub-score per dimension.

Every scorer is a pure function of ``(SeekerFeatureSet, CandidateFeatureSet)``
and returns a ``SubScore`` carrying its weight for the candidate kind plus
the evidence the explanation templates need. Dimensions that are
unspecified on either side score a neutral 0.5 and are flagged ``neutral``.
"""

import logging
import re
from collections.abc import Callable

from rapidfuzz import fuzz

from models.schemas.features import EXPERIENCE_LEVELS, CandidateFeatureSet, SalaryBand, SeekerFeatureSet
from models.schemas.match_result import SubScore
from services.recommendation.aggregator import KEYWORD_BOOST_MAX, dimension_weight, dimensions_for

logger = logging.getLogger(__name__)

NEUTRAL = 0.5

# Experience level distance -> value
_LEVEL_DISTANCE_SCORES = {0: 1.0, 1: 0.6}
_FAR_LEVEL_SCORE = 0.2

# Location
_HYBRID_FOR_REMOTE_SEEKER = 0.3
_REMOTE_FRIENDLY_PREFS = {"remote", "hybrid", "flexible"}

# Category
CATEGORY_PARTIAL_SCORE = 0.4
CATEGORY_FUZZY_THRESHOLD = 80

# Recency
RECENCY_FLOOR = 0.2
RESOURCE_RECENCY = 0.7

# Keyword boost saturates at this many matched bio keywords
KEYWORD_SATURATION = 2

# Word families treated as the same keyword
KEYWORD_VARIATIONS: dict[str, tuple[str, ...]] = {
    "programming": ("coding", "development", "developer", "software"),
    "marketing": ("advertising", "promotion", "branding"),
    "management": ("admin", "administration", "coordination"),
    "communication": ("communications", "interpersonal"),
    "business": ("commerce", "trade", "enterprise"),
    "technology": ("tech", "ict"),
    "data": ("analytics", "analysis", "research"),
    "customer": ("client", "consumer"),
    "project": ("program", "initiative"),
}

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#.\-]*")
_LOCATION_SPLIT_RE = re.compile(r"[,/()\-\s]+")


def _sub_score(
    dimension: str,
    candidate: CandidateFeatureSet,
    value: float,
    note: str,
    weight: float | None,
    neutral: bool = False,
    **details,
) -> SubScore:
    if weight is None:
        weight = dimension_weight(candidate.kind, dimension)
    return SubScore(
        dimension=dimension,
        value=round(min(1.0, max(0.0, value)), 4),
        weight=weight,
        contribution_note=note,
        neutral=neutral,
        details=details,
    )


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

def _job_skills_value(seeker: SeekerFeatureSet, candidate: CandidateFeatureSet) -> float | None:
    required = candidate.required_skills
    if not required:
        return None
    return len(seeker.skills & required) / max(1, len(required))


def score_skills(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    """Jobs: share of required skills the seeker has. Resources: share of
    the resource's skills that fill the seeker's gaps."""
    required = candidate.required_skills
    if not required:
        return _sub_score(
            "skills", candidate, NEUTRAL, "no skills listed", weight, neutral=True,
            matched=[], required=0,
        )

    if candidate.kind == "job":
        matched = sorted(seeker.skills & required)
        value = len(matched) / max(1, len(required))
        return _sub_score(
            "skills", candidate, value, f"{len(matched)}/{len(required)} required skills",
            weight, matched=matched, required=len(required),
        )

    new_skills = required - seeker.skills
    if seeker.gap_skills:
        targeted = sorted(s for s in new_skills if s in seeker.gap_skills)
        basis = "gap"
    else:
        targeted = sorted(new_skills)
        basis = "new"
    value = len(targeted) / len(required)
    return _sub_score(
        "skills", candidate, value, f"teaches {len(targeted)}/{len(required)} missing skills",
        weight, taught=targeted, required=len(required), basis=basis,
    )


def _tokens(text: str) -> set[str]:
    return {t.rstrip(".-") for t in _TOKEN_RE.findall(text)}


def _keyword_family(word: str) -> str | None:
    for base, variants in KEYWORD_VARIATIONS.items():
        if word == base or word.startswith(base) or word in variants:
            return base
    return None


def _matched_keywords(keywords: frozenset[str], text: str) -> list[str]:
    if not keywords or not text:
        return []
    tokens = _tokens(text)
    families = {f for f in map(_keyword_family, tokens) if f}
    matched = []
    for kw in keywords:
        if kw in tokens:
            matched.append(kw)
        else:
            family = _keyword_family(kw)
            if family and family in families:
                matched.append(kw)
    return sorted(matched)


def score_keyword(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    """Bonus for seeker bio keywords appearing in the job title/description.

    The boost is worth up to +0.1 on the skills value and never lifts it
    past 1.0; ``value`` is the boost actually applied, as a fraction of 0.1.
    """
    matched = _matched_keywords(seeker.bio_keywords, candidate.text)
    if not matched:
        return _sub_score("keyword", candidate, 0.0, "no bio keywords found", weight, keywords=[])

    skills_value = _job_skills_value(seeker, candidate)
    if skills_value is None:
        skills_value = NEUTRAL
    boost = KEYWORD_BOOST_MAX * min(1.0, len(matched) / KEYWORD_SATURATION)
    effective = min(boost, 1.0 - skills_value)
    return _sub_score(
        "keyword", candidate, effective / KEYWORD_BOOST_MAX,
        f"{len(matched)} bio keywords in posting", weight, keywords=matched,
    )


def score_gap_coverage(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    """Bonus for resources that teach the most frequent gap skills."""
    gaps = seeker.gap_skills
    if not gaps or not candidate.required_skills:
        return _sub_score(
            "gap_coverage", candidate, 0.0, "no known skill gaps", weight, neutral=True, covered=[],
        )
    covered = sorted(
        (s for s in candidate.required_skills if s in gaps and s not in seeker.skills),
        key=lambda s: (-gaps[s], s),
    )
    if not covered:
        return _sub_score("gap_coverage", candidate, 0.0, "covers no gap skills", weight, covered=[])
    top_frequency = max(gaps.values())
    value = gaps[covered[0]] / top_frequency
    return _sub_score(
        "gap_coverage", candidate, value, f"covers {len(covered)} gap skills", weight,
        covered=covered, top_skill=covered[0], frequency=gaps[covered[0]],
    )


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

def score_experience(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    if candidate.experience_level is None:
        return _sub_score(
            "experience", candidate, NEUTRAL, "level not specified", weight, neutral=True,
            seeker_level=seeker.experience_level, candidate_level=None,
        )
    distance = abs(
        EXPERIENCE_LEVELS.index(seeker.experience_level)
        - EXPERIENCE_LEVELS.index(candidate.experience_level)
    )
    value = _LEVEL_DISTANCE_SCORES.get(distance, _FAR_LEVEL_SCORE)
    return _sub_score(
        "experience", candidate, value,
        f"{seeker.experience_level} vs {candidate.experience_level}", weight,
        seeker_level=seeker.experience_level, candidate_level=candidate.experience_level,
        distance=distance,
    )


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

def _location_tokens(location: str) -> set[str]:
    return {t for t in _LOCATION_SPLIT_RE.split(location) if len(t) > 2 and t != "remote"}


def _matching_location(preferred: frozenset[str], location: str | None) -> str | None:
    if not location:
        return None
    candidate_tokens = _location_tokens(location)
    for pref in sorted(preferred):
        if pref in location or location in pref or _location_tokens(pref) & candidate_tokens:
            return pref
    return None


def score_location(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    pref = seeker.remote_preference
    mode = candidate.work_mode
    seeker_unspecified = not seeker.preferred_locations and pref == "flexible"
    candidate_unspecified = candidate.location is None and mode is None
    if seeker_unspecified or candidate_unspecified:
        return _sub_score("location", candidate, NEUTRAL, "location not specified", weight, neutral=True)

    city = _matching_location(seeker.preferred_locations, candidate.location)
    if city:
        return _sub_score("location", candidate, 1.0, f"in {city}", weight, city=city, mode=mode)

    if mode == "remote":
        if pref in _REMOTE_FRIENDLY_PREFS:
            return _sub_score("location", candidate, 1.0, "remote", weight, remote=True, mode=mode)
        return _sub_score("location", candidate, 0.0, "remote, seeker wants on-site", weight, mode=mode)

    if pref == "remote":
        if mode == "hybrid":
            return _sub_score(
                "location", candidate, _HYBRID_FOR_REMOTE_SEEKER, "hybrid, seeker wants remote",
                weight, mode=mode,
            )
        if mode == "onsite":
            return _sub_score(
                "location", candidate, 0.0, "on-site, seeker wants remote", weight, mode=mode
            )
        return _sub_score(
            "location", candidate, NEUTRAL, "work mode not specified", weight, neutral=True,
        )

    if not seeker.preferred_locations or candidate.location is None:
        return _sub_score("location", candidate, NEUTRAL, "no city to compare", weight, neutral=True, mode=mode)

    return _sub_score(
        "location", candidate, 0.0, f"{candidate.location} not preferred", weight,
        location=candidate.location, mode=mode,
    )


# ---------------------------------------------------------------------------
# Salary
# ---------------------------------------------------------------------------

def salary_overlap(a: SalaryBand, b: SalaryBand) -> float:
    """Overlap of two intervals relative to the narrower one."""
    low = max(a.min, b.min)
    high = min(a.max, b.max)
    if high < low:
        return 0.0
    narrower = min(a.max - a.min, b.max - b.min)
    if narrower == 0:
        return 1.0
    return min(1.0, (high - low) / narrower)


def score_salary(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    expected = seeker.salary_expectation
    offered = candidate.salary_range
    if expected is None or offered is None:
        return _sub_score("salary", candidate, NEUTRAL, "salary not specified", weight, neutral=True)
    if expected.currency and offered.currency and expected.currency != offered.currency:
        return _sub_score(
            "salary", candidate, NEUTRAL, f"{offered.currency} vs {expected.currency}", weight,
            neutral=True,
        )
    value = salary_overlap(expected, offered)
    return _sub_score(
        "salary", candidate, value, f"{offered.min}-{offered.max} {offered.currency}".strip(), weight,
        offered_min=offered.min, offered_max=offered.max, currency=offered.currency,
    )


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

def score_category(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    """Stated interests decide a mismatch; skill-inferred categories only add matches.

    Without stated interests, anything short of an exact skill-category
    match is neutral, so learning a skill never lowers this dimension.
    """
    category = candidate.category
    stated = seeker.interest_categories
    interests = stated | seeker.skill_categories
    if not category or not interests:
        return _sub_score("category", candidate, NEUTRAL, "no category to compare", weight, neutral=True)
    if category in interests:
        return _sub_score("category", candidate, 1.0, category, weight, category=category, interest=category)
    if not stated:
        return _sub_score("category", candidate, NEUTRAL, "no stated interests", weight, neutral=True)
    for interest in sorted(interests):
        if (
            interest in category
            or category in interest
            or fuzz.token_set_ratio(category, interest) >= CATEGORY_FUZZY_THRESHOLD
        ):
            return _sub_score(
                "category", candidate, CATEGORY_PARTIAL_SCORE, f"{category} ~ {interest}", weight,
                category=category, interest=interest,
            )
    return _sub_score("category", candidate, 0.0, f"{category} not of interest", weight, category=category)


# ---------------------------------------------------------------------------
# Recency
# ---------------------------------------------------------------------------

def score_recency(
    seeker: SeekerFeatureSet, candidate: CandidateFeatureSet, weight: float | None = None
) -> SubScore:
    """Linear decay from 1.0 on the posting day to 0.2 at the deadline."""
    if candidate.kind == "resource":
        return _sub_score("recency", candidate, RESOURCE_RECENCY, "evergreen", weight, evergreen=True)

    now = seeker.as_of
    posted, deadline = candidate.posted_at, candidate.deadline
    if deadline is not None and now >= deadline:
        return _sub_score("recency", candidate, RECENCY_FLOOR, "deadline passed", weight, expired=True)
    if posted is None:
        return _sub_score("recency", candidate, NEUTRAL, "posting date unknown", weight, neutral=True)

    days_since = max(0, (now - posted).days)
    if now <= posted:
        return _sub_score("recency", candidate, 1.0, "posted today", weight, days_since_posted=0)
    window = (deadline - posted).total_seconds() if deadline is not None else 0.0
    if window <= 0:
        return _sub_score("recency", candidate, RECENCY_FLOOR, "no open window", weight)
    elapsed = (now - posted).total_seconds() / window
    value = 1.0 - (1.0 - RECENCY_FLOOR) * elapsed
    return _sub_score(
        "recency", candidate, value, f"posted {days_since}d ago", weight,
        days_since_posted=days_since, days_to_deadline=(deadline - now).days,
    )


SCORERS: dict[str, Callable[..., SubScore]] = {
    "skills": score_skills,
    "experience": score_experience,
    "location": score_location,
    "salary": score_salary,
    "category": score_category,
    "recency": score_recency,
    "keyword": score_keyword,
    "gap_coverage": score_gap_coverage,
}


def score_all(
    seeker: SeekerFeatureSet,
    candidate: CandidateFeatureSet,
    gap_coverage_weight: float | None = None,
) -> list[SubScore]:
    """Run every scorer that applies to the candidate's kind."""
    sub_scores = []
    for dimension in dimensions_for(candidate.kind):
        weight = gap_coverage_weight if dimension == "gap_coverage" else None
        sub_scores.append(SCORERS[dimension](seeker, candidate, weight=weight))
    return sub_scores
