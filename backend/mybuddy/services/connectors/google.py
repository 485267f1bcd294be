# backend/mybuddy/services/connectors/google.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from .base import BaseConnector, text_or_empty
from .classification import calculate_relevance_score, determine_source_type
from ...schemas.search import SourceRecord

# Custom Search refuses num > 10
GOOGLE_MAX_PAGE_SIZE = 10


class GoogleSearchConnector(BaseConnector):
    """
    Google Custom Search JSON API.

    Needs both an API key and a programmable search engine id (cx).
    Publication date and author come from the first `pagemap.metatags` entry
    when the indexed page exposes them.
    """

    name = "google"
    search_url = "https://www.googleapis.com/customsearch/v1"

    def __init__(
        self,
        api_key: str,
        search_engine_id: str,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = (api_key or "").strip()
        self.search_engine_id = (search_engine_id or "").strip()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.search_engine_id)

    async def _request(
        self, client: httpx.AsyncClient, query: str, max_results: int
    ) -> httpx.Response:
        params = {
            "key": self.api_key,
            "cx": self.search_engine_id,
            "q": query,
            "num": max(1, min(max_results, GOOGLE_MAX_PAGE_SIZE)),
        }
        return await client.get(self.search_url, params=params)

    @staticmethod
    def _first_metatags(item: Dict[str, Any]) -> Dict[str, Any]:
        pagemap = item.get("pagemap") or {}
        metatags = pagemap.get("metatags") or []
        if metatags and isinstance(metatags[0], dict):
            return metatags[0]
        return {}

    def _build(self, item: Dict[str, Any]) -> SourceRecord:
        title = text_or_empty(item.get("title"))
        url = text_or_empty(item.get("link"))
        description = text_or_empty(item.get("snippet"))
        metatags = self._first_metatags(item)
        published: Optional[str] = metatags.get("article:published_time") or None
        author: Optional[str] = metatags.get("author") or None

        return SourceRecord(
            title=title,
            url=url,
            description=description,
            source_type=determine_source_type(url),
            relevance_score=calculate_relevance_score(title, description, url, published),
            publication_date=published,
            author=author,
        )

    def _parse(self, payload: Dict[str, Any], query: str, max_results: int) -> List[SourceRecord]:
        items = payload.get("items") or []
        return self._parse_items(items, self._build)
