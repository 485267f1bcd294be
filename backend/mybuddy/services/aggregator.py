# backend/mybuddy/services/aggregator.py
from __future__ import annotations

import asyncio
import logging
import math
from typing import Iterable, List

import httpx

from .connectors import ConnectorSet, build_connectors
from ..core.config import ProviderConfig
from ..schemas.search import SourceRecord

logger = logging.getLogger(__name__)


def dedupe_by_url(sources: Iterable[SourceRecord]) -> List[SourceRecord]:
    """Keep the first record seen for each url, preserving order."""
    seen: set[str] = set()
    unique: List[SourceRecord] = []
    for source in sources:
        if source.url in seen:
            continue
        seen.add(source.url)
        unique.append(source)
    return unique


def relevance_sort_key(source: SourceRecord) -> tuple[bool, float]:
    # NaN compares false against everything, so give it its own bucket at the end
    score = source.relevance_score
    if math.isnan(score):
        return (True, 0.0)
    return (False, -score)


def sort_by_relevance(sources: Iterable[SourceRecord]) -> List[SourceRecord]:
    """Descending by relevance score; stable for ties."""
    return sorted(sources, key=relevance_sort_key)


class SearchAggregator:
    """
    Multi-provider fetch → merge → dedup → sort → truncate.

    - Every configured keyed provider is queried (Google, then Bing). Calls run
      concurrently but results are merged in priority order, so the output
      never depends on which provider answers first.
    - The free fallback runs only when the keyed providers produced nothing,
      or once more as a last resort after an unexpected failure.
    - Never raises; the worst case is an empty list.
    """

    def __init__(
        self,
        config: ProviderConfig,
        connectors: ConnectorSet | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.connectors = connectors or build_connectors(config, transport=transport)

    @property
    def fallback_enabled(self) -> bool:
        fallback = self.connectors.fallback
        return fallback is not None and fallback.is_configured

    async def _fetch_keyed(self, query: str, max_results: int) -> List[SourceRecord]:
        configured = [c for c in self.connectors.keyed if c.is_configured]
        if not configured:
            return []

        # gather() returns results in argument order, i.e. provider priority
        batches = await asyncio.gather(
            *(c.fetch(query, max_results) for c in configured)
        )
        merged: List[SourceRecord] = []
        for batch in batches:
            merged.extend(batch)
        return merged

    def _finalize(self, sources: List[SourceRecord], max_results: int) -> List[SourceRecord]:
        return sort_by_relevance(dedupe_by_url(sources))[:max_results]

    async def aggregate(self, query: str, max_results: int) -> List[SourceRecord]:
        all_sources: List[SourceRecord] = []
        fallback_attempted = False

        try:
            all_sources.extend(await self._fetch_keyed(query, max_results))

            if not all_sources and self.fallback_enabled:
                fallback_attempted = True
                all_sources.extend(await self.connectors.fallback.fetch(query, max_results))

            results = self._finalize(all_sources, max_results)
        except Exception as e:
            logger.exception(
                "Error performing aggregated search: %s",
                e,
                extra={"stage": "aggregate"},
            )
            if fallback_attempted or not self.fallback_enabled:
                return []
            try:
                all_sources.extend(await self.connectors.fallback.fetch(query, max_results))
                results = self._finalize(all_sources, max_results)
                logger.info(
                    "Fallback search returned %d results",
                    len(results),
                    extra={"stage": "aggregate", "provider": self.connectors.fallback.name},
                )
            except Exception as fallback_error:
                logger.exception(
                    "Fallback search also failed: %s",
                    fallback_error,
                    extra={"stage": "aggregate"},
                )
                return []

        logger.info(
            "Aggregated %d unique sources",
            len(results),
            extra={"stage": "aggregate"},
        )
        return results
