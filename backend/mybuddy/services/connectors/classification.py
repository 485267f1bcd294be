# backend/mybuddy/services/connectors/classification.py
"""
URL heuristics shared by all provider adapters.

Both tables are ordered; the first matching row wins. Extending the
vocabulary means adding a row, not another branch.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

DEFAULT_SOURCE_TYPE = "web_page"

SOURCE_TYPE_RULES: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("wikipedia.org",), "encyclopedia"),
    (("arxiv.org", "researchgate.net"), "research_paper"),
    (("github.com",), "code_repository"),
    (("stackoverflow.com",), "qa_forum"),
    (("medium.com", "dev.to"), "blog"),
    ((".edu",), "academic"),
    ((".gov",), "government"),
    (("news.", "bbc.com", "cnn.com"), "news"),
)

AUTHORITY_BONUSES: Sequence[Tuple[Tuple[str, ...], float]] = (
    (("wikipedia.org", "arxiv.org"), 0.2),
    ((".edu", ".gov"), 0.15),
    (("github.com",), 0.1),
)

BASE_SCORE = 0.5
TITLE_BONUS = 0.2
DESCRIPTION_BONUS = 0.1
DESCRIPTION_MIN_LENGTH = 100
DATE_BONUS = 0.1


def _first_match(url: str, table: Sequence[Tuple[Tuple[str, ...], object]]):
    for patterns, value in table:
        if any(p in url for p in patterns):
            return value
    return None


def determine_source_type(url: str) -> str:
    return _first_match(url or "", SOURCE_TYPE_RULES) or DEFAULT_SOURCE_TYPE


def authority_bonus(url: str) -> float:
    return _first_match(url or "", AUTHORITY_BONUSES) or 0.0


def calculate_relevance_score(
    title: str,
    description: str,
    url: str,
    publication_date: Optional[str] = None,
) -> float:
    score = BASE_SCORE

    if title and title.strip():
        score += TITLE_BONUS
    if len(description or "") > DESCRIPTION_MIN_LENGTH:
        score += DESCRIPTION_BONUS
    if publication_date and publication_date.strip():
        score += DATE_BONUS

    score += authority_bonus(url)

    return min(max(score, 0.0), 1.0)
