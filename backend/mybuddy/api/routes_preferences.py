from fastapi import APIRouter

from ..schemas.search import SearchPreferences
from ..services.preferences import (
    CONTENT_TYPES,
    SORT_OPTIONS,
    academic_preferences,
    default_preferences,
    news_preferences,
    technical_preferences,
)

router = APIRouter(prefix="/search/preferences", tags=["search-preferences"])


@router.get("/default", response_model=SearchPreferences)
def get_default_preferences():
    return default_preferences()


@router.get("/academic", response_model=SearchPreferences)
def get_academic_preferences():
    return academic_preferences()


@router.get("/news", response_model=SearchPreferences)
def get_news_preferences():
    return news_preferences()


@router.get("/technical", response_model=SearchPreferences)
def get_technical_preferences():
    return technical_preferences()


@router.post("/custom", response_model=SearchPreferences)
def create_custom_preferences(payload: SearchPreferences):
    """
    Echo caller-built preferences after validation.

    Clamping (min relevance into [0, 1], max results into [1, 100], blank
    language to "en") happens while the payload is parsed.
    """
    return payload


@router.get("/content-types", response_model=list[str])
def get_available_content_types():
    return list(CONTENT_TYPES)


@router.get("/sort-options", response_model=list[str])
def get_available_sort_options():
    return list(SORT_OPTIONS)
