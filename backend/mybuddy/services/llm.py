from __future__ import annotations

from functools import lru_cache
from contextlib import contextmanager
from threading import BoundedSemaphore

from openai import OpenAI

from ..core.config import Settings, get_settings

_llm_semaphore: BoundedSemaphore | None = None


def _get_semaphore() -> BoundedSemaphore:
    """
    Lazy-initialised global semaphore for limiting concurrent LLM calls.
    """
    global _llm_semaphore
    if _llm_semaphore is None:
        settings = get_settings()
        _llm_semaphore = BoundedSemaphore(settings.LLM_MAX_CONCURRENCY)
    return _llm_semaphore


@contextmanager
def limit_llm_concurrency():
    """
    Simple context manager to bound concurrent calls to the LLM provider.

    Use it inside the thread that actually performs the HTTP request:

        with limit_llm_concurrency():
            client.chat.completions.create(...)
    """
    sem = _get_semaphore()
    sem.acquire()
    try:
        yield
    finally:
        sem.release()


def llm_configured(settings: Settings) -> bool:
    if not settings.OPENAI_ENABLED:
        return False
    return bool((settings.OPENROUTER_API_KEY or "").strip() or (settings.OPENAI_API_KEY or "").strip())


def llm_status(settings: Settings) -> str:
    has_key = bool((settings.OPENROUTER_API_KEY or "").strip() or (settings.OPENAI_API_KEY or "").strip())
    if settings.OPENAI_ENABLED and has_key:
        return "LLM overview generation is enabled and ready for use"
    if settings.OPENAI_ENABLED:
        return "LLM overview generation is enabled but no API key is configured"
    return "LLM overview generation is disabled"


@lru_cache(maxsize=1)
def get_llm_client() -> OpenAI | None:
    """
    Centralised factory for the OpenAI‑compatible client.

    - If OPENROUTER_API_KEY is set, route requests via OpenRouter.
    - Otherwise, fall back to the standard OpenAI API using OPENAI_API_KEY.
    - Returns None when generation is disabled or no key is configured;
      callers then use their offline fallback.

    This is cached so all callers in a process share a single client instance.
    """
    settings = get_settings()

    if not llm_configured(settings):
        return None

    if settings.OPENROUTER_API_KEY:
        return OpenAI(
            base_url="https://openrouter.ai/api/v1",
            api_key=settings.OPENROUTER_API_KEY.strip(),
            default_headers={
                "HTTP-Referer": settings.FRONTEND_ORIGIN or "http://localhost:8081",
                "X-Title": settings.APP_NAME,
            },
        )

    return OpenAI(api_key=settings.OPENAI_API_KEY.strip())
