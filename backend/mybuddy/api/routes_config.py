from fastapi import APIRouter, Depends

from .deps import get_search_service
from ..core.config import get_settings
from ..schemas.search import ApplicationStatus, ProviderStatus
from ..services.llm import llm_configured, llm_status
from ..services.search import SearchService

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/status", response_model=ApplicationStatus)
def get_application_status(service: SearchService = Depends(get_search_service)):
    """
    Read-only view of what the search pipeline can use right now.

    Never exposes credentials, only whether each one is present.
    """
    settings = get_settings()
    providers = [
        ProviderStatus(name=name, configured=configured)
        for name, configured in service.aggregator.connectors.describe()
    ]
    return ApplicationStatus(
        name=settings.APP_NAME,
        version=settings.APP_VERSION,
        env=settings.ENV,
        providers=providers,
        llm_enabled=llm_configured(settings),
        llm_model=settings.LLM_MODEL,
        llm_status=llm_status(settings),
    )
