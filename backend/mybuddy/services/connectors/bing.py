# backend/mybuddy/services/connectors/bing.py
from __future__ import annotations

from typing import Any, Dict, List

import httpx

from .base import BaseConnector, text_or_empty
from .classification import calculate_relevance_score, determine_source_type
from ...schemas.search import SourceRecord


class BingSearchConnector(BaseConnector):
    """Bing Web Search v7; results live under `webPages.value`."""

    name = "bing"
    search_url = "https://api.bing.microsoft.com/v7.0/search"
    market = "en-US"

    def __init__(
        self,
        api_key: str,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = (api_key or "").strip()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Ocp-Apim-Subscription-Key": self.api_key,
            "accept": "application/json",
        }

    async def _request(
        self, client: httpx.AsyncClient, query: str, max_results: int
    ) -> httpx.Response:
        params = {"q": query, "count": max_results, "mkt": self.market}
        return await client.get(self.search_url, params=params, headers=self._headers())

    def _build(self, item: Dict[str, Any]) -> SourceRecord:
        title = text_or_empty(item.get("name"))
        url = text_or_empty(item.get("url"))
        description = text_or_empty(item.get("snippet"))
        # Only news-like pages carry datePublished in the basic response
        published = item.get("datePublished") or None

        return SourceRecord(
            title=title,
            url=url,
            description=description,
            source_type=determine_source_type(url),
            relevance_score=calculate_relevance_score(title, description, url, published),
            publication_date=published,
            author=None,
        )

    def _parse(self, payload: Dict[str, Any], query: str, max_results: int) -> List[SourceRecord]:
        web_pages = payload.get("webPages") or {}
        return self._parse_items(web_pages.get("value") or [], self._build)
