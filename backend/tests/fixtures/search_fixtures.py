"""
Shared test fixtures for search pipeline tests.

Raw provider payloads (trimmed copies of real response shapes), a source
factory, and small fakes for connectors and the LLM client.
"""
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from mybuddy.schemas.search import SourceRecord
from mybuddy.services.connectors.base import BaseConnector


def make_source(
    url: str,
    score: float = 0.5,
    title: Optional[str] = None,
    source_type: str = "web_page",
    publication_date: Optional[str] = None,
    description: str = "",
) -> SourceRecord:
    return SourceRecord(
        title=title if title is not None else f"Title for {url}",
        url=url,
        description=description,
        source_type=source_type,
        relevance_score=score,
        publication_date=publication_date,
    )


# ---------------------------------------------------------------------------
# Provider payloads
# ---------------------------------------------------------------------------

LONG_SNIPPET = (
    "Python is a high-level, general-purpose programming language. Its design "
    "philosophy emphasizes code readability with the use of significant indentation."
)

GOOGLE_PAYLOAD: Dict[str, Any] = {
    "kind": "customsearch#search",
    "items": [
        {
            "title": "Python (programming language) - Wikipedia",
            "link": "https://en.wikipedia.org/wiki/Python_(programming_language)",
            "snippet": LONG_SNIPPET,
            "pagemap": {
                "metatags": [
                    {
                        "article:published_time": "2024-03-01",
                        "author": "Wikipedia contributors",
                    }
                ]
            },
        },
        {
            "title": "python/cpython",
            "link": "https://github.com/python/cpython",
            "snippet": "The Python programming language",
        },
        {
            # Missing everything but the link
            "link": "https://example.com/bare",
        },
    ],
}

BING_PAYLOAD: Dict[str, Any] = {
    "_type": "SearchResponse",
    "webPages": {
        "value": [
            {
                "name": "Welcome to Python.org",
                "url": "https://www.python.org/",
                "snippet": "The official home of the Python Programming Language",
            },
            {
                "name": "Python tutorial - Stack Overflow",
                "url": "https://stackoverflow.com/questions/tagged/python",
                "snippet": "Questions tagged python",
                "datePublished": "2024-05-02T10:00:00.0000000Z",
            },
        ]
    },
}

DUCKDUCKGO_PAYLOAD: Dict[str, Any] = {
    "Heading": "Python (programming language)",
    "AbstractText": "Python is a high-level programming language.",
    "AbstractURL": "https://en.wikipedia.org/wiki/Python_(programming_language)",
    "AbstractSource": "Wikipedia",
    "RelatedTopics": [
        {
            "FirstURL": "https://duckduckgo.com/Guido_van_Rossum",
            "Text": "Guido van Rossum - Dutch programmer, creator of Python.",
        },
        {
            "Name": "Implementations",
            "Topics": [
                {"FirstURL": "https://duckduckgo.com/PyPy", "Text": "PyPy"},
            ],
        },
        {
            "FirstURL": "https://duckduckgo.com/CPython",
            "Text": "CPython - reference implementation.",
        },
        {"FirstURL": "", "Text": "No url here"},
    ],
}

DUCKDUCKGO_EMPTY_PAYLOAD: Dict[str, Any] = {
    "Heading": "",
    "AbstractText": "",
    "AbstractURL": "",
    "RelatedTopics": [],
}


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeConnector(BaseConnector):
    """Connector returning canned sources (or raising) without HTTP."""

    def __init__(
        self,
        name: str,
        sources: Optional[List[SourceRecord]] = None,
        configured: bool = True,
        raises: Optional[Exception] = None,
    ) -> None:
        super().__init__()
        self.name = name
        self._sources = sources or []
        self._configured = configured
        self._raises = raises
        self.calls: List[tuple] = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def _request(self, client, query, max_results):  # pragma: no cover - unused
        raise NotImplementedError

    def _parse(self, payload, query, max_results):  # pragma: no cover - unused
        raise NotImplementedError

    async def fetch(self, query: str, max_results: int) -> List[SourceRecord]:
        self.calls.append((query, max_results))
        if self._raises is not None:
            raise self._raises
        return list(self._sources)


def make_llm_client(content: str = "Generated overview [1].") -> MagicMock:
    client = MagicMock()
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    client.chat.completions.create.return_value = MagicMock(choices=[choice])
    return client
