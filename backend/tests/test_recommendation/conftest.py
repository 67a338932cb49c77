"""Feature-set factories shared by the recommendation tests."""

from datetime import datetime, timezone

import pytest

from models.schemas.features import CandidateFeatureSet, SeekerFeatureSet
from services.recommendation.strategy_registry import clear as clear_strategies

AS_OF = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def make_seeker():
    def _make(**overrides) -> SeekerFeatureSet:
        data = {"seeker_id": "s1", "as_of": AS_OF}
        data.update(overrides)
        return SeekerFeatureSet(**data)
    return _make


@pytest.fixture
def make_job():
    def _make(**overrides) -> CandidateFeatureSet:
        data = {"candidate_id": "j1", "kind": "job", "title": "Frontend Developer"}
        data.update(overrides)
        return CandidateFeatureSet(**data)
    return _make


@pytest.fixture
def make_resource():
    def _make(**overrides) -> CandidateFeatureSet:
        data = {
            "candidate_id": "r1",
            "kind": "resource",
            "title": "React Basics",
            "work_mode": "remote",
        }
        data.update(overrides)
        return CandidateFeatureSet(**data)
    return _make


@pytest.fixture(autouse=True)
def _reset_strategies():
    """Clear the strategy registry before each test."""
    clear_strategies()
    yield
    clear_strategies()
