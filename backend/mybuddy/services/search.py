# backend/mybuddy/services/search.py
from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Callable, List
from uuid import uuid4

from .aggregator import SearchAggregator
from .overview import OverviewGenerator
from .preferences import apply_preferences, default_preferences
from ..schemas.search import (
    SearchFeedbackRequest,
    SearchRequest,
    SearchResponse,
    SourceRecord,
)

logger = logging.getLogger(__name__)

PRIMARY_COUNT = 3
SUPPORTING_COUNT = 5
MAX_KEY_POINTS = 3

ERROR_OVERVIEW = (
    "Sorry, I encountered an error while searching. "
    "Please try again or check your search query."
)
ERROR_KEY_POINTS = ["Search encountered an error", "Please try again", "Check your query"]


def calculate_confidence_score(sources: List[SourceRecord]) -> float:
    """Mean relevance of the sources, clamped to [0, 1]; NaN and infinities give 0."""
    if not sources:
        return 0.0

    try:
        average = sum(s.relevance_score for s in sources) / len(sources)
    except Exception as e:
        logger.warning("Error calculating confidence score: %s", e, extra={"stage": "confidence"})
        return 0.0

    if math.isnan(average) or math.isinf(average):
        return 0.0
    if average < 0.0:
        return 0.0
    if average > 1.0:
        return 1.0
    return average


def extract_key_points(query: str, sources: List[SourceRecord]) -> List[str]:
    """First three distinct titles, in input order."""
    key_points: List[str] = []
    for source in sources:
        if source.title in key_points:
            continue
        key_points.append(source.title)
        if len(key_points) == MAX_KEY_POINTS:
            break
    return key_points


def categorize_sources(
    sources: List[SourceRecord],
) -> tuple[List[SourceRecord], List[SourceRecord], List[SourceRecord]]:
    """Split into primary / supporting / additional tiers, keeping the given order."""
    primary = sources[:PRIMARY_COUNT]
    supporting = sources[PRIMARY_COUNT : PRIMARY_COUNT + SUPPORTING_COUNT]
    additional = sources[PRIMARY_COUNT + SUPPORTING_COUNT :]
    return primary, supporting, additional


def error_response(query: str) -> SearchResponse:
    return SearchResponse(
        query=query,
        ai_overview=ERROR_OVERVIEW,
        primary_sources=[],
        supporting_research=[],
        additional_sources=[],
        confidence_score=0.0,
        key_points=list(ERROR_KEY_POINTS),
        total_sources=0,
        timestamp=datetime.now(),
    )


class SearchService:
    """
    request → preferences → aggregate → filter → overview → key points →
    confidence → tiers → response.

    The whole pipeline sits behind one guard: any failure returns
    `error_response` and nothing that was gathered before it.
    """

    def __init__(
        self,
        aggregator: SearchAggregator,
        overview_generator: OverviewGenerator,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.aggregator = aggregator
        self.overview_generator = overview_generator
        self._today = today

    async def perform_search(self, request: SearchRequest) -> SearchResponse:
        request_id = str(uuid4())
        log_extra = {"request_id": request_id, "profile_id": request.profile_id}

        try:
            preferences = request.preferences or default_preferences()

            logger.info("Search started", extra={**log_extra, "stage": "start"})

            sources = await self.aggregator.aggregate(request.query, preferences.max_results)
            filtered = apply_preferences(sources, preferences, today=self._today())

            ai_overview = await self.overview_generator.generate(
                request.query, filtered, preferences
            )
            key_points = extract_key_points(request.query, filtered)
            confidence_score = calculate_confidence_score(filtered)
            primary, supporting, additional = categorize_sources(filtered)

            logger.info(
                "Search completed: %d sources, confidence %.2f",
                len(filtered),
                confidence_score,
                extra={**log_extra, "stage": "completed"},
            )

            return SearchResponse(
                query=request.query,
                ai_overview=ai_overview,
                primary_sources=primary,
                supporting_research=supporting,
                additional_sources=additional,
                confidence_score=confidence_score,
                key_points=key_points,
                total_sources=len(filtered),
                timestamp=datetime.now(),
            )
        except Exception:
            logger.exception("Error performing search", extra={**log_extra, "stage": "failed"})
            return error_response(request.query)

    def submit_feedback(self, request: SearchFeedbackRequest) -> None:
        logger.info(
            "Search feedback submitted: rating=%s helpful=%s",
            request.rating,
            request.was_helpful,
            extra={"profile_id": request.profile_id, "stage": "feedback"},
        )
