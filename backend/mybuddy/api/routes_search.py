import logging

from fastapi import APIRouter, Depends, Response

from .deps import get_search_service
from ..schemas.search import SearchFeedbackRequest, SearchRequest, SearchResponse
from ..services.search import SearchService

router = APIRouter(tags=["search"])
logger = logging.getLogger(__name__)


@router.post("/search", response_model=SearchResponse)
async def perform_search(
    payload: SearchRequest,
    service: SearchService = Depends(get_search_service),
):
    """
    Run a search and return the AI overview with tiered sources.

    Always answers 200: pipeline failures come back as a degraded response
    (empty sources, confidence 0.0), never as a 5xx.
    """
    return await service.perform_search(payload)


@router.post("/search/feedback", status_code=200)
def submit_feedback(
    payload: SearchFeedbackRequest,
    service: SearchService = Depends(get_search_service),
):
    service.submit_feedback(payload)
    return Response(status_code=200)
