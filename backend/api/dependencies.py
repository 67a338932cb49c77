"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.recommendation.orchestrator import RecommendationOrchestrator
from services.recommendation.store import InMemoryStore, RecommendationStore


@lru_cache
def get_store() -> RecommendationStore:
    return InMemoryStore()


@lru_cache
def get_orchestrator() -> RecommendationOrchestrator:
    return RecommendationOrchestrator(store=get_store(), settings=settings)
