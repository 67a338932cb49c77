"""Scoring outputs: sub-scores, match results and the gap report."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from models.schemas.features import CandidateKind

Dimension = Literal[
    "skills",
    "experience",
    "location",
    "salary",
    "category",
    "recency",
    "keyword",  # bonus on top of skills for jobs
    "gap_coverage",  # bonus for resources teaching frequent gap skills
]


class SubScore(BaseModel):
    """One dimension's contribution to a match score."""
    dimension: Dimension
    value: float = Field(..., ge=0.0, le=1.0)
    weight: float = Field(..., ge=0.0)
    contribution_note: str = ""
    neutral: bool = False  # dimension unspecified on either side
    details: dict[str, Any] = {}  # evidence consumed by the explanation templates

    @property
    def contribution(self) -> float:
        return self.value * self.weight


class MatchResult(BaseModel):
    """A scored job or learning resource.

    ``score`` is always a fraction in [0, 1]; presentation layers that show
    percentages multiply at the boundary.
    """
    candidate_id: str
    kind: CandidateKind
    title: str = ""
    score: float = Field(..., ge=0.0, le=1.0)
    sub_scores: list[SubScore] = []
    reasons: list[str] = []
    skills_gap: list[str] = []  # required - seeker, sorted
    matched_skills: list[str] = []
    areas_of_improvement: list[str] = []


class GapEntry(BaseModel):
    skill: str
    frequency: int


class CandidateWarning(BaseModel):
    """A candidate skipped during a request."""
    candidate_id: str
    kind: CandidateKind
    reason: str


class Diagnostics(BaseModel):
    warnings: list[CandidateWarning] = []
    scored: int = 0
    skipped: int = 0
    cache_hit: bool = False
    elapsed_ms: float = 0.0


class RecommendationResult(BaseModel):
    """Terminal state of one orchestration call."""
    status: Literal["success", "empty"]
    seeker_id: str
    recommendations: list[MatchResult] = []
    gap_report: list[GapEntry] = []
    total: int = 0
    page: int = 1
    page_size: int = 0
    partial: bool = False
    diagnostics: Diagnostics = Diagnostics()
