from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_orchestrator
from config import settings
from models.requests import PreviewRequest
from models.responses import RecommendationResponse, to_response
from services.recommendation.errors import (
    CandidateExtractionFailed,
    CandidateNotFound,
    InvalidProfile,
    SeekerNotFound,
)
from services.recommendation.orchestrator import RecommendationOrchestrator

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "selection_strategy": settings.selection_strategy,
        "cache_enabled": settings.cache_enabled,
    }


@router.get("/seekers/{seeker_id}/recommendations", response_model=RecommendationResponse)
@limiter.limit(settings.rate_limit)
async def seeker_recommendations(
    request: Request,
    seeker_id: str,
    kind: Literal["job", "resource"] | None = None,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
    orchestrator: RecommendationOrchestrator = Depends(get_orchestrator),
):
    try:
        result = await orchestrator.recommend(seeker_id, kind=kind, page=page, page_size=page_size)
    except SeekerNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidProfile as e:
        raise HTTPException(status_code=422, detail=str(e))
    return to_response(result)


@router.get(
    "/seekers/{seeker_id}/jobs/{job_id}/learning",
    response_model=RecommendationResponse,
)
@limiter.limit(settings.rate_limit)
async def learning_for_job(
    request: Request,
    seeker_id: str,
    job_id: str,
    limit: int = Query(5, ge=1, le=settings.max_page_size),
    orchestrator: RecommendationOrchestrator = Depends(get_orchestrator),
):
    try:
        result = await orchestrator.recommend_learning_for_job(seeker_id, job_id, limit=limit)
    except (SeekerNotFound, CandidateNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidProfile, CandidateExtractionFailed) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return to_response(result)


@router.post("/recommendations/preview", response_model=RecommendationResponse)
@limiter.limit(settings.rate_limit)
async def preview(
    request: Request,
    body: PreviewRequest,
    orchestrator: RecommendationOrchestrator = Depends(get_orchestrator),
):
    try:
        result = await orchestrator.preview(
            body.profile,
            body.jobs,
            body.resources,
            kind=body.kind,
            page=body.page,
            page_size=body.page_size,
            as_of=body.as_of,
        )
    except InvalidProfile as e:
        raise HTTPException(status_code=422, detail=str(e))
    return to_response(result)
