# backend/mybuddy/services/overview.py
from __future__ import annotations

import asyncio
import logging
import textwrap
from typing import Callable, List, Optional

from openai import OpenAI

from .llm import get_llm_client, limit_llm_concurrency
from ..core.config import Settings, get_settings
from ..schemas.search import SearchPreferences, SourceRecord

logger = logging.getLogger(__name__)

OFFLINE_LABEL = "[Offline overview]"
MAX_DESCRIPTION_CHARS = 500


def fallback_overview(query: str, source_count: int) -> str:
    return (
        f'{OFFLINE_LABEL} AI summarization is not available, so no synthesis was '
        f'generated for "{query}". {source_count} source(s) were found; '
        f"see the listed sources for details."
    )


def _format_sources(sources: List[SourceRecord]) -> str:
    blocks = []
    for i, s in enumerate(sources, start=1):
        description = (s.description or "")[:MAX_DESCRIPTION_CHARS]
        lines = [f"[{i}] {s.title or s.url}", f"URL: {s.url}", f"Type: {s.source_type}"]
        if s.publication_date:
            lines.append(f"Published: {s.publication_date}")
        if description:
            lines.append(f"Snippet: {description}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_overview_prompts(
    query: str,
    sources: List[SourceRecord],
    preferences: Optional[SearchPreferences],
) -> tuple[str, str]:
    tone = (preferences.tone if preferences else None) or "professional"
    audience = preferences.audience if preferences else None
    language = preferences.language if preferences else "en"

    system_prompt = textwrap.dedent(
        f"""
        You are MyBuddy, a research assistant that writes short overviews of web
        search results. Write in a {tone} tone{f" for {audience}" if audience else ""}.
        Answer in the language with ISO code "{language}".
        Only use facts present in the numbered sources and cite them as [n].
        If the sources disagree or are thin, say so plainly.
        """
    ).strip()

    user_prompt = (
        f'Search query: "{query}"\n\n'
        f"Sources:\n{_format_sources(sources)}\n\n"
        "Write a 2-3 paragraph overview that answers the query."
    )
    return system_prompt, user_prompt


class OverviewGenerator:
    """
    Natural-language synthesis of the filtered sources.

    Without a configured LLM backend (or with nothing to summarise) it
    returns `fallback_overview`. Backend errors are not caught here.
    """

    def __init__(
        self,
        client_factory: Callable[[], OpenAI | None] = get_llm_client,
        settings: Settings | None = None,
    ) -> None:
        self._client_factory = client_factory
        self.settings = settings or get_settings()

    def _complete(self, client: OpenAI, system_prompt: str, user_prompt: str) -> str:
        with limit_llm_concurrency():
            resp = client.chat.completions.create(
                model=self.settings.LLM_MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.settings.LLM_TEMPERATURE,
                max_tokens=self.settings.LLM_MAX_TOKENS,
            )
        return (resp.choices[0].message.content or "").strip()

    async def generate(
        self,
        query: str,
        sources: List[SourceRecord],
        preferences: Optional[SearchPreferences] = None,
    ) -> str:
        client = self._client_factory()
        if client is None or not sources:
            logger.info(
                "Using offline overview (backend=%s, sources=%d)",
                "none" if client is None else "configured",
                len(sources),
                extra={"stage": "overview"},
            )
            return fallback_overview(query, len(sources))

        system_prompt, user_prompt = build_overview_prompts(
            query, sources[: self.settings.OVERVIEW_MAX_SOURCES], preferences
        )
        # The OpenAI client is synchronous; keep it off the event loop
        return await asyncio.to_thread(self._complete, client, system_prompt, user_prompt)
