from typing import Literal

from pydantic import BaseModel

from models.schemas.match_result import MatchResult, RecommendationResult


class SubScoreItem(BaseModel):
    dimension: str
    value: float
    weight: float


class RecommendationItem(BaseModel):
    candidate_id: str
    kind: Literal["job", "resource"]
    title: str = ""
    score: float = 0.0
    reasons: list[str] = []
    skills_gap: list[str] = []
    areas_of_improvement: list[str] = []
    # Scoring transparency
    sub_scores: list[SubScoreItem] = []


class GapReportItem(BaseModel):
    skill: str
    frequency: int


class WarningItem(BaseModel):
    candidate_id: str
    kind: str
    reason: str


class RecommendationResponse(BaseModel):
    status: Literal["success", "empty"] = "success"
    seeker_id: str
    recommendations: list[RecommendationItem] = []
    gap_report: list[GapReportItem] = []
    total: int = 0
    page: int = 1
    page_size: int = 0
    partial: bool = False
    score_unit: Literal["fraction"] = "fraction"
    warnings: list[WarningItem] = []


def _to_item(result: MatchResult) -> RecommendationItem:
    return RecommendationItem(
        candidate_id=result.candidate_id,
        kind=result.kind,
        title=result.title,
        score=result.score,
        reasons=result.reasons,
        skills_gap=result.skills_gap,
        areas_of_improvement=result.areas_of_improvement,
        sub_scores=[
            SubScoreItem(dimension=s.dimension, value=round(s.value, 4), weight=s.weight)
            for s in result.sub_scores
        ],
    )


def to_response(result: RecommendationResult) -> RecommendationResponse:
    """Map an engine result to the public response schema."""
    return RecommendationResponse(
        status=result.status,
        seeker_id=result.seeker_id,
        recommendations=[_to_item(r) for r in result.recommendations],
        gap_report=[GapReportItem(skill=g.skill, frequency=g.frequency) for g in result.gap_report],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        partial=result.partial,
        warnings=[
            WarningItem(candidate_id=w.candidate_id, kind=w.kind, reason=w.reason)
            for w in result.diagnostics.warnings
        ],
    )
