"""Feature extraction: raw profile / job / resource records -> feature sets.

Normalizes skills through a static alias table, infers the seeker's
experience level from work history and education, derives stated
interest categories from preferences, past applications and bio, keeps
skill-inferred categories separately, and maps every optional field to
``None`` when absent so the scorers can fall back to neutral.
"""

import logging
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError

from models.schemas.candidates import JobPosting, LearningResource
from models.schemas.features import CandidateFeatureSet, SalaryBand, SeekerFeatureSet
from models.schemas.seeker_profile import (
    Education,
    SalaryRange,
    SeekerProfile,
    SkillEntry,
    WorkExperience,
    location_text,
)
from services.recommendation.errors import CandidateExtractionFailed, InvalidProfile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Skill alias table: aliases -> canonical form
# Applied before any set comparison so "React.js" and "react" are one skill
# ---------------------------------------------------------------------------
SKILL_ALIASES: dict[str, str] = {
    # JavaScript ecosystem
    "js": "javascript", "es6": "javascript", "ecmascript": "javascript",
    "ts": "typescript",
    "react.js": "react", "reactjs": "react",
    "vue.js": "vue", "vuejs": "vue",
    "angular.js": "angular", "angularjs": "angular",
    "node.js": "node", "nodejs": "node",
    "next.js": "nextjs",
    "express.js": "express", "expressjs": "express",
    "html5": "html", "css3": "css",
    # Python ecosystem
    "py": "python", "python3": "python",
    "sklearn": "scikit-learn",
    "tensor flow": "tensorflow",
    "torch": "pytorch",
    # Cloud & DevOps
    "k8s": "kubernetes", "kube": "kubernetes",
    "amazon web services": "aws",
    "google cloud": "gcp", "google cloud platform": "gcp",
    "microsoft azure": "azure",
    "cicd": "ci/cd",
    # Databases
    "postgres": "postgresql",
    "mongo": "mongodb", "mongo db": "mongodb",
    "ms sql": "sql server", "mssql": "sql server",
    # Languages
    "c sharp": "c#", "csharp": "c#",
    "cpp": "c++",
    "golang": "go",
    # Data / AI
    "ml": "machine learning",
    "dl": "deep learning",
    "nlp": "natural language processing",
    "ms excel": "excel", "microsoft excel": "excel",
    "powerbi": "power bi",
    # Methodologies and soft skills
    "pm": "project management", "project mgmt": "project management",
    "agile methodology": "agile",
    "communications": "communication",
}

# Category -> terms whose presence in bio words or skills signals interest
CATEGORY_TERMS: dict[str, tuple[str, ...]] = {
    "technical": ("programming", "development", "coding", "software", "tech"),
    "soft-skills": ("communication", "leadership", "management", "teamwork"),
    "career": ("career", "professional", "business"),
    "interview": ("interview", "interviewing"),
    "resume": ("resume", "curriculum"),
    "networking": ("networking", "connections"),
    "data": ("data", "analytics", "analysis", "statistics"),
    "marketing": ("marketing", "advertising", "branding", "sales"),
    "finance": ("finance", "accounting", "banking"),
    "design": ("design", "figma", "ux", "ui"),
}

_LEVEL_ALIASES: dict[str, str] = {
    "entry": "entry", "entry-level": "entry", "entry level": "entry",
    "junior": "entry", "intern": "entry", "internship": "entry", "graduate": "entry",
    "mid": "mid", "mid-level": "mid", "mid level": "mid",
    "intermediate": "mid", "middle": "mid",
    "senior": "senior", "sr": "senior", "experienced": "senior",
    "lead": "lead", "principal": "lead", "staff": "lead",
    "executive": "lead", "manager": "lead", "director": "lead",
}

# Resource difficulty expressed on the experience ladder
_DIFFICULTY_LEVELS: dict[str, str] = {
    "beginner": "entry",
    "intermediate": "mid",
    "advanced": "senior",
    "expert": "lead",
}

_REMOTE_ALIASES: dict[str, str] = {
    "remote": "remote",
    "hybrid": "hybrid",
    "onsite": "onsite", "on-site": "onsite", "on site": "onsite",
    "office": "onsite", "in-office": "onsite",
    "flexible": "flexible", "any": "flexible",
}

# Total months of work history -> level (upper bounds, inclusive)
_LEVEL_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (24, "entry"),
    (60, "mid"),
    (120, "senior"),
)

# A completed degree counts as this much work history when inferring the level
DEGREE_CREDIT_MONTHS = 12
_DEGREE_TERMS = ("bachelor", "master", "mba", "phd", "doctor")

BIO_STOPWORDS: frozenset[str] = frozenset({
    "about", "above", "after", "again", "also", "been", "before", "being",
    "both", "could", "does", "doing", "during", "each", "from", "have",
    "having", "here", "into", "just", "looking", "more", "most", "much",
    "only", "other", "over", "same", "should", "some", "such", "than",
    "that", "their", "them", "then", "there", "these", "they", "this",
    "those", "through", "very", "want", "were", "what", "when", "where",
    "which", "while", "with", "within", "would", "your", "years", "year",
    "experience", "experienced", "passionate", "currently", "work", "working",
})

_WORD_RE = re.compile(r"[a-z0-9][a-z0-9+#.\-]*")


def normalize_skill(skill: str) -> str:
    """Lower-case, trim, collapse whitespace and resolve aliases."""
    cleaned = re.sub(r"\s+", " ", skill.lower().strip().rstrip(".,:;"))
    return SKILL_ALIASES.get(cleaned, cleaned)


def normalize_skills(skills: Iterable[str | SkillEntry]) -> frozenset[str]:
    """Normalize a mixed list of skill strings / skill objects into a set."""
    normalized: set[str] = set()
    for skill in skills:
        name = skill.name if isinstance(skill, SkillEntry) else skill
        if not name:
            continue
        norm = normalize_skill(name)
        if norm:
            normalized.add(norm)
    return frozenset(normalized)


def _normalize_text(value: str) -> str:
    return re.sub(r"\s+", " ", value.lower().strip())


def _normalize_category(value: str) -> str:
    return _normalize_text(value).replace("_", "-")


def _normalize_level(raw: str | None) -> str | None:
    if not raw:
        return None
    return _LEVEL_ALIASES.get(_normalize_text(raw))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _months_between(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def total_experience_months(work_experience: list[WorkExperience], as_of: datetime) -> int:
    """Sum months across work history. Current roles end at ``as_of``."""
    today = as_of.date()
    total = 0
    for entry in work_experience:
        if entry.start_date is None:
            continue
        if entry.current or entry.end_date is None:
            end = today if entry.current else entry.start_date
        else:
            end = entry.end_date
        total += max(0, _months_between(entry.start_date, end))
    return total


def level_for_months(months: int) -> str:
    """Map total months of work history to an experience level."""
    for upper, level in _LEVEL_THRESHOLDS:
        if months <= upper:
            return level
    return "lead"


def has_degree(education: list[Education]) -> bool:
    """True if any entry is a bachelor's degree or higher."""
    degrees = (_normalize_text(e.degree) for e in education)
    return any(term in degree for degree in degrees for term in _DEGREE_TERMS)


def _salary_band(salary: SalaryRange | None) -> SalaryBand | None:
    """Closed interval from a possibly half-specified range; None if unspecified."""
    if salary is None:
        return None
    low = salary.min or 0
    high = salary.max or 0
    if low <= 0 and high <= 0:
        return None
    if high <= 0:
        high = low
    if low > high:
        low, high = high, low
    return SalaryBand(min=low, max=high, currency=salary.currency.strip().upper())


def extract_keywords(text: str) -> frozenset[str]:
    """Content words (>3 chars, not stop words) from free text."""
    words = {w.rstrip(".-") for w in _WORD_RE.findall(text.lower())}
    return frozenset(w for w in words if len(w) > 3 and w not in BIO_STOPWORDS)


def infer_categories(terms: Iterable[str]) -> frozenset[str]:
    """Categories whose signal terms appear in any of the given words/skills."""
    terms = list(terms)
    found = set()
    for category, signals in CATEGORY_TERMS.items():
        # prefix match at a word start: "tech" hits "technical", "ui" misses "building"
        patterns = [re.compile(rf"\b{re.escape(s)}") for s in signals]
        if any(p.search(term) for term in terms for p in patterns):
            found.add(category)
    return frozenset(found)


# ---------------------------------------------------------------------------
# Seeker
# ---------------------------------------------------------------------------

def extract_seeker(profile: SeekerProfile | dict[str, Any], as_of: datetime) -> SeekerFeatureSet:
    """Build the seeker feature set. Raises InvalidProfile on malformed input."""
    if not isinstance(profile, SeekerProfile):
        seeker_id = str(profile.get("id") or profile.get("_id") or "<unknown>")
        try:
            profile = SeekerProfile.model_validate(profile)
        except ValidationError as e:
            raise InvalidProfile(seeker_id, str(e)) from e

    as_of = _as_utc(as_of)
    prefs = profile.job_preferences

    skills = normalize_skills(profile.skills)
    for entry in profile.work_experience:
        skills |= normalize_skills(entry.skills_used)

    months = total_experience_months(profile.work_experience, as_of)
    degree = has_degree(profile.education)
    credit = DEGREE_CREDIT_MONTHS if degree else 0
    level = _normalize_level(profile.experience_level) or level_for_months(months + credit)

    locations = {_normalize_text(loc) for loc in prefs.locations if loc.strip()}
    fallback = location_text(profile.location).strip()
    if not locations and fallback:
        locations.add(_normalize_text(fallback))

    remote_pref = _REMOTE_ALIASES.get(_normalize_text(prefs.remote_preference), "flexible")

    bio_keywords = extract_keywords(profile.bio)
    interests = {_normalize_category(c) for c in prefs.industries + profile.applied_categories if c.strip()}
    interests |= infer_categories(bio_keywords)

    return SeekerFeatureSet(
        seeker_id=profile.id,
        skills=skills,
        experience_level=level,
        experience_months=months,
        preferred_locations=frozenset(locations),
        remote_preference=remote_pref,
        salary_expectation=_salary_band(prefs.salary_range),
        interest_categories=frozenset(interests),
        skill_categories=infer_categories(skills),
        bio_keywords=bio_keywords,
        as_of=as_of,
        bio_length=len(profile.bio.strip()),
        has_work_history=bool(profile.work_experience),
        has_degree=degree,
    )


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------

def _extract_job(job: JobPosting, recency_window_days: int) -> CandidateFeatureSet:
    location = _normalize_text(location_text(job.location)) or None
    work_mode = _REMOTE_ALIASES.get(_normalize_text(job.work_mode))
    if work_mode == "flexible":
        work_mode = None
    if location and "remote" in location:
        work_mode = work_mode or "remote"
        if location == "remote":
            location = None

    posted_at = _as_utc(job.posted_at) if job.posted_at else None
    deadline = _as_utc(job.application_deadline) if job.application_deadline else None
    if deadline is None and posted_at is not None:
        deadline = posted_at + timedelta(days=recency_window_days)

    return CandidateFeatureSet(
        candidate_id=job.id,
        kind="job",
        title=job.title,
        text=_normalize_text(f"{job.title} {job.description}"),
        required_skills=normalize_skills(job.skills) | normalize_skills(job.required_skills),
        preferred_skills=normalize_skills(job.preferred_skills),
        experience_level=_normalize_level(job.experience_level),
        location=location,
        work_mode=work_mode,
        salary_range=_salary_band(job.salary),
        category=_normalize_category(job.job_category) or None,
        posted_at=posted_at,
        deadline=deadline,
    )


def _extract_resource(resource: LearningResource) -> CandidateFeatureSet:
    difficulty = _normalize_text(resource.difficulty or "")
    return CandidateFeatureSet(
        candidate_id=resource.id,
        kind="resource",
        title=resource.title,
        text=_normalize_text(f"{resource.title} {resource.description}"),
        required_skills=normalize_skills(resource.skills),
        experience_level=_DIFFICULTY_LEVELS.get(difficulty) or _normalize_level(difficulty),
        work_mode="remote",
        category=_normalize_category(resource.category) or None,
        duration_minutes=resource.duration,
    )


def extract_candidate(
    raw: JobPosting | LearningResource | dict[str, Any],
    kind: str,
    recency_window_days: int = 30,
) -> CandidateFeatureSet:
    """Build a candidate feature set. Raises CandidateExtractionFailed."""
    if isinstance(raw, dict):
        candidate_id = str(raw.get("id") or raw.get("_id") or "<unknown>")
        model = JobPosting if kind == "job" else LearningResource
        try:
            raw = model.model_validate(raw)
        except ValidationError as e:
            raise CandidateExtractionFailed(candidate_id, kind, str(e)) from e

    if kind == "job" and isinstance(raw, JobPosting):
        return _extract_job(raw, recency_window_days)
    if kind == "resource" and isinstance(raw, LearningResource):
        return _extract_resource(raw)
    raise CandidateExtractionFailed(
        getattr(raw, "id", "<unknown>"), kind, f"unsupported record for kind {kind!r}"
    )
