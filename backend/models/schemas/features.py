"""Normalized feature sets compared by the component scorers."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

ExperienceLevel = Literal["entry", "mid", "senior", "lead"]
RemotePreference = Literal["remote", "hybrid", "onsite", "flexible"]
WorkMode = Literal["remote", "hybrid", "onsite"]
CandidateKind = Literal["job", "resource"]

# Ordinal order used for level distance
EXPERIENCE_LEVELS: tuple[str, ...] = ("entry", "mid", "senior", "lead")


class SalaryBand(BaseModel):
    """Closed salary interval; both bounds are always set."""
    min: int
    max: int
    currency: str = ""


class SeekerFeatureSet(BaseModel):
    """Seeker side of a comparison. Built fresh for every request."""
    seeker_id: str
    skills: frozenset[str] = frozenset()
    experience_level: ExperienceLevel = "entry"
    experience_months: int = 0
    preferred_locations: frozenset[str] = frozenset()
    remote_preference: RemotePreference = "flexible"
    salary_expectation: SalaryBand | None = None
    interest_categories: frozenset[str] = frozenset()  # stated: preferences, applications, bio
    skill_categories: frozenset[str] = frozenset()  # inferred from skills only
    bio_keywords: frozenset[str] = frozenset()
    # skill -> frequency across relevant jobs; set after job gap analysis
    gap_skills: dict[str, int] = {}
    as_of: datetime

    # Profile completeness hints for improvement tips
    bio_length: int = 0
    has_work_history: bool = False
    has_degree: bool = False


class CandidateFeatureSet(BaseModel):
    """Job or learning resource side of a comparison."""
    candidate_id: str
    kind: CandidateKind
    title: str = ""
    text: str = ""  # lower-cased title + description, for keyword search
    required_skills: frozenset[str] = frozenset()
    preferred_skills: frozenset[str] = frozenset()
    experience_level: ExperienceLevel | None = None  # resource difficulty mapped onto levels
    location: str | None = None
    work_mode: WorkMode | None = None
    salary_range: SalaryBand | None = None
    category: str | None = None
    posted_at: datetime | None = None
    deadline: datetime | None = None
    duration_minutes: int | None = None
