"""Pydantic contracts passed between the recommendation stages."""

from models.schemas.candidates import JobPosting, LearningResource
from models.schemas.features import CandidateFeatureSet, SalaryBand, SeekerFeatureSet
from models.schemas.match_result import (
    GapEntry,
    MatchResult,
    RecommendationResult,
    SubScore,
)
from models.schemas.seeker_profile import SeekerProfile

__all__ = [
    "SeekerProfile",
    "JobPosting",
    "LearningResource",
    "SeekerFeatureSet",
    "CandidateFeatureSet",
    "SalaryBand",
    "SubScore",
    "MatchResult",
    "GapEntry",
    "RecommendationResult",
]
