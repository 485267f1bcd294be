from functools import lru_cache

from ..core.config import ProviderConfig, get_settings
from ..services.aggregator import SearchAggregator
from ..services.overview import OverviewGenerator
from ..services.search import SearchService


@lru_cache
def get_search_service() -> SearchService:
    """
    Process-wide SearchService wired from Settings.

    Routes depend on this; tests override it via `app.dependency_overrides`.
    """
    settings = get_settings()
    return SearchService(
        aggregator=SearchAggregator(ProviderConfig.from_settings(settings)),
        overview_generator=OverviewGenerator(settings=settings),
    )
