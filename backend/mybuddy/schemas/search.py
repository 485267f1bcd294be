# backend/mybuddy/schemas/search.py
import math
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_LANGUAGE = "en"
DEFAULT_MIN_RELEVANCE_SCORE = 0.3
DEFAULT_MAX_RESULTS = 20
MIN_MAX_RESULTS = 1
MAX_MAX_RESULTS = 100


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceRecord(CamelModel):
    """A single normalised search result from any provider."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    title: str = ""
    url: str = ""
    description: str = ""
    source_type: str = Field("web_page", alias="type")
    # Nominally 0.0-1.0, but consumers must tolerate out-of-range and NaN
    relevance_score: float = 0.0
    publication_date: str | None = None
    author: str | None = None


class SearchPreferences(CamelModel):
    preferred_sources: List[str] = Field(default_factory=list)
    content_types: List[str] = Field(default_factory=list)
    language: str = DEFAULT_LANGUAGE
    date_from: str | None = None
    date_to: str | None = None
    min_relevance_score: float = DEFAULT_MIN_RELEVANCE_SCORE
    max_results: int = DEFAULT_MAX_RESULTS
    # Advisory only; provider selection is driven by configuration
    preferred_search_engines: List[str] = Field(default_factory=list)
    excluded_domains: List[str] = Field(default_factory=list)
    academic_only: bool = False
    recent_content_days: int | None = None
    sort_order: str = "relevance"
    tone: str = "professional"
    audience: str | None = None

    @field_validator("min_relevance_score")
    @classmethod
    def clamp_min_relevance_score(cls, v: float) -> float:
        if math.isnan(v):
            return DEFAULT_MIN_RELEVANCE_SCORE
        return min(max(v, 0.0), 1.0)

    @field_validator("max_results")
    @classmethod
    def clamp_max_results(cls, v: int) -> int:
        return min(max(v, MIN_MAX_RESULTS), MAX_MAX_RESULTS)

    @field_validator("language")
    @classmethod
    def default_blank_language(cls, v: str) -> str:
        return v.strip() or DEFAULT_LANGUAGE

    @field_validator("sort_order")
    @classmethod
    def normalise_sort_order(cls, v: str) -> str:
        return v.strip().lower() or "relevance"

    @field_validator("date_from", "date_to", "audience", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            stripped = v.strip()
            return stripped or None
        return v


class SearchRequest(CamelModel):
    query: str
    profile_id: int | None = None
    preferences: SearchPreferences | None = None

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        return v


class SearchResponse(CamelModel):
    query: str
    ai_overview: str
    primary_sources: List[SourceRecord] = Field(default_factory=list)
    supporting_research: List[SourceRecord] = Field(default_factory=list)
    additional_sources: List[SourceRecord] = Field(default_factory=list)
    confidence_score: float = 0.0
    key_points: List[str] = Field(default_factory=list)
    total_sources: int = 0
    timestamp: datetime


class SearchFeedbackRequest(CamelModel):
    query: str
    profile_id: int | None = None
    rating: str
    comments: str | None = None
    was_helpful: bool
    suggestions: str | None = None


class ProviderStatus(CamelModel):
    name: str
    configured: bool


class ApplicationStatus(CamelModel):
    name: str
    version: str
    env: str
    providers: List[ProviderStatus]
    llm_enabled: bool
    llm_model: str
    llm_status: str
