# backend/mybuddy/services/preferences.py
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from .aggregator import sort_by_relevance
from ..schemas.search import SearchPreferences, SourceRecord

logger = logging.getLogger(__name__)

ACADEMIC_URL_MARKERS = (".edu", "arxiv.org", "researchgate.net", "scholar.google.com")
ACADEMIC_TYPE_MARKERS = ("research_paper", "academic")

CONTENT_TYPES: List[str] = [
    "research_paper",
    "news",
    "blog",
    "encyclopedia",
    "documentation",
    "code_repository",
    "qa_forum",
    "tutorial",
    "academic",
    "article",
    "video",
    "podcast",
]

SORT_OPTIONS: List[str] = ["relevance", "date", "title"]


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an ISO date, or the date part of an ISO datetime.

    Returns None for missing or unparseable input; never raises.
    """
    if not value:
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _source_date(source: SourceRecord, purpose: str) -> Optional[date]:
    if not source.publication_date:
        return None
    parsed = parse_iso_date(source.publication_date)
    if parsed is None:
        logger.warning(
            "Failed to parse date for %s: %s",
            purpose,
            source.publication_date,
            extra={"stage": "filter"},
        )
    return parsed


def _narrow(
    sources: List[SourceRecord],
    keep: Callable[[SourceRecord], bool],
    label: str,
) -> List[SourceRecord]:
    narrowed = [s for s in sources if keep(s)]
    logger.debug("After %s filtering: %d sources", label, len(narrowed))
    return narrowed


def _is_academic(source: SourceRecord) -> bool:
    return any(m in source.url for m in ACADEMIC_URL_MARKERS) or any(
        m in source.source_type for m in ACADEMIC_TYPE_MARKERS
    )


def _within_date_range(
    sources: List[SourceRecord], preferences: SearchPreferences
) -> List[SourceRecord]:
    date_from = parse_iso_date(preferences.date_from)
    date_to = parse_iso_date(preferences.date_to)

    # A bound that cannot be parsed matches nothing
    bad_bounds = [
        raw
        for raw, parsed in ((preferences.date_from, date_from), (preferences.date_to, date_to))
        if raw and parsed is None
    ]
    if bad_bounds:
        logger.warning(
            "Unparseable date range bound(s) %s; no source can match",
            bad_bounds,
            extra={"stage": "filter"},
        )
        return []

    def keep(source: SourceRecord) -> bool:
        published = _source_date(source, "date range")
        if published is None:
            return False
        return (date_from is None or published >= date_from) and (
            date_to is None or published <= date_to
        )

    return _narrow(sources, keep, "date")


def _recent_only(
    sources: List[SourceRecord], days: int, today: date
) -> List[SourceRecord]:
    try:
        cutoff = today - timedelta(days=days)
    except OverflowError:
        # Window reaches past the representable calendar
        cutoff = date.min if days > 0 else date.max

    def keep(source: SourceRecord) -> bool:
        published = _source_date(source, "recent content")
        return published is not None and published >= cutoff

    return _narrow(sources, keep, "recent content")


def sort_sources(sources: List[SourceRecord], sort_order: str) -> List[SourceRecord]:
    order = (sort_order or "relevance").lower()
    if order == "date":
        # Descending by date; sources without a usable date go last
        dated = [(parse_iso_date(s.publication_date), s) for s in sources]
        with_date = sorted(
            (pair for pair in dated if pair[0] is not None),
            key=lambda pair: pair[0],
            reverse=True,
        )
        return [s for _, s in with_date] + [s for d, s in dated if d is None]
    if order == "title":
        return sorted(sources, key=lambda s: s.title.lower())
    return sort_by_relevance(sources)


def apply_preferences(
    sources: List[SourceRecord],
    preferences: SearchPreferences | None,
    today: date | None = None,
) -> List[SourceRecord]:
    """
    Narrow, re-sort and cap aggregated sources according to preferences.

    Stages run in a fixed order, each only when its field is set, and each
    works on what the previous stage kept:

      content types → preferred sources → excluded domains → academic only →
      date range → recency window → min relevance → sort → max results
    """
    if preferences is None:
        return sources

    today = today or date.today()
    filtered = list(sources)

    if preferences.content_types:
        wanted = [t.lower() for t in preferences.content_types]
        filtered = _narrow(
            filtered,
            lambda s: any(t in s.source_type.lower() for t in wanted),
            "content type",
        )

    if preferences.preferred_sources:
        filtered = _narrow(
            filtered,
            lambda s: any(d in s.url for d in preferences.preferred_sources),
            "preferred sources",
        )

    if preferences.excluded_domains:
        filtered = _narrow(
            filtered,
            lambda s: not any(d in s.url for d in preferences.excluded_domains),
            "excluded domains",
        )

    if preferences.academic_only:
        filtered = _narrow(filtered, _is_academic, "academic")

    if preferences.date_from is not None or preferences.date_to is not None:
        filtered = _within_date_range(filtered, preferences)

    if preferences.recent_content_days is not None:
        filtered = _recent_only(filtered, preferences.recent_content_days, today)

    filtered = _narrow(
        filtered,
        lambda s: s.relevance_score >= preferences.min_relevance_score,
        "relevance",
    )

    filtered = sort_sources(filtered, preferences.sort_order)[: preferences.max_results]

    logger.info(
        "Applied preferences: %d -> %d sources",
        len(sources),
        len(filtered),
        extra={"stage": "filter"},
    )
    return filtered


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


def default_preferences() -> SearchPreferences:
    return SearchPreferences()


def academic_preferences() -> SearchPreferences:
    return SearchPreferences(
        preferred_sources=["arxiv.org", "researchgate.net", ".edu", "scholar.google.com"],
        content_types=["research_paper", "academic", "encyclopedia"],
        min_relevance_score=0.6,
        max_results=25,
        preferred_search_engines=["google", "bing"],
        excluded_domains=["social-media.com", "blog-spam.com"],
        academic_only=True,
        recent_content_days=365,
        sort_order="relevance",
    )


def news_preferences() -> SearchPreferences:
    return SearchPreferences(
        preferred_sources=["bbc.com", "cnn.com", "reuters.com", "techcrunch.com"],
        content_types=["news", "article", "blog"],
        min_relevance_score=0.4,
        max_results=15,
        preferred_search_engines=["google", "bing"],
        recent_content_days=30,
        sort_order="date",
    )


def technical_preferences() -> SearchPreferences:
    return SearchPreferences(
        preferred_sources=[
            "github.com",
            "stackoverflow.com",
            "docs.microsoft.com",
            "developer.mozilla.org",
        ],
        content_types=["documentation", "code_repository", "qa_forum", "tutorial"],
        min_relevance_score=0.5,
        max_results=20,
        preferred_search_engines=["google", "bing"],
        recent_content_days=180,
        sort_order="relevance",
    )


PRESETS: Dict[str, Callable[[], SearchPreferences]] = {
    "default": default_preferences,
    "academic": academic_preferences,
    "news": news_preferences,
    "technical": technical_preferences,
}
