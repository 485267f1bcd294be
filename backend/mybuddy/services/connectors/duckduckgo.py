# backend/mybuddy/services/connectors/duckduckgo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from .base import BaseConnector, text_or_empty
from ...schemas.search import SourceRecord

ABSTRACT_SCORE = 0.95
RELATED_TOPIC_SCORE = 0.8


def _usable_url(url: Any) -> Optional[str]:
    text = text_or_empty(url).strip()
    if not text or text == "N/A":
        return None
    return text


class DuckDuckGoConnector(BaseConnector):
    """
    DuckDuckGo Instant Answer API: free, keyless, used as the fallback.

    It is not a web index; a query yields at most one abstract plus a list
    of related topics, so scores are fixed rather than heuristic.
    """

    name = "duckduckgo"
    search_url = "https://api.duckduckgo.com/"

    def __init__(
        self,
        enabled: bool = True,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self.enabled = enabled

    @property
    def is_configured(self) -> bool:
        return self.enabled

    async def _request(
        self, client: httpx.AsyncClient, query: str, max_results: int
    ) -> httpx.Response:
        params = {
            "q": query,
            "format": "json",
            "no_html": "1",
            "skip_disambig": "1",
        }
        return await client.get(self.search_url, params=params)

    def _parse(self, payload: Dict[str, Any], query: str, max_results: int) -> List[SourceRecord]:
        sources: List[SourceRecord] = []

        abstract_url = _usable_url(payload.get("AbstractURL"))
        if abstract_url:
            sources.append(
                SourceRecord(
                    title=text_or_empty(payload.get("Heading")) or query,
                    url=abstract_url,
                    description=text_or_empty(payload.get("AbstractText")),
                    source_type="information",
                    relevance_score=ABSTRACT_SCORE,
                    author=payload.get("AbstractSource") or None,
                )
            )

        def _build_topic(topic: Dict[str, Any]) -> Optional[SourceRecord]:
            # Category groups ({"Name": ..., "Topics": [...]}) have no FirstURL
            url = _usable_url(topic.get("FirstURL"))
            if not url:
                return None
            text = text_or_empty(topic.get("Text"))
            return SourceRecord(
                title=text or query,
                url=url,
                description=text,
                source_type="related_topic",
                relevance_score=RELATED_TOPIC_SCORE,
            )

        sources.extend(self._parse_items(payload.get("RelatedTopics") or [], _build_topic))
        return sources[:max_results]
