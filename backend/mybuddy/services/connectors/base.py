from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

from ...schemas.search import SourceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderError:
    """Why a provider produced nothing: not_configured, timeout, network, http_status, parse, unexpected."""

    kind: str
    message: str = ""


@dataclass
class ProviderResult:
    provider: str
    sources: List[SourceRecord] = field(default_factory=list)
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BaseConnector(ABC):
    """
    One external search API.

    Subclasses build the provider-specific request and parse its JSON.
    `search` turns every failure into a ProviderResult with an error set;
    `fetch` is the plain list contract and never raises.
    """

    name: str

    def __init__(
        self,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return True

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    @abstractmethod
    async def _request(
        self, client: httpx.AsyncClient, query: str, max_results: int
    ) -> httpx.Response:
        ...

    @abstractmethod
    def _parse(self, payload: Dict[str, Any], query: str, max_results: int) -> List[SourceRecord]:
        ...

    async def search(self, query: str, max_results: int) -> ProviderResult:
        if not self.is_configured:
            return ProviderResult(self.name, error=ProviderError("not_configured"))

        try:
            async with self._client() as client:
                resp = await self._request(client, query, max_results)
                resp.raise_for_status()
                payload = resp.json()
        except httpx.TimeoutException as e:
            return ProviderResult(self.name, error=ProviderError("timeout", str(e)))
        except httpx.HTTPStatusError as e:
            return ProviderResult(
                self.name,
                error=ProviderError("http_status", f"HTTP {e.response.status_code}"),
            )
        except httpx.HTTPError as e:
            return ProviderResult(self.name, error=ProviderError("network", str(e)))
        except ValueError as e:
            return ProviderResult(self.name, error=ProviderError("parse", f"invalid JSON: {e}"))

        if not isinstance(payload, dict):
            return ProviderResult(
                self.name,
                error=ProviderError("parse", f"expected JSON object, got {type(payload).__name__}"),
            )

        try:
            sources = self._parse(payload, query, max_results)
        except Exception as e:
            return ProviderResult(self.name, error=ProviderError("parse", str(e)))

        return ProviderResult(self.name, sources=sources)

    async def fetch(self, query: str, max_results: int) -> List[SourceRecord]:
        try:
            result = await self.search(query, max_results)
        except Exception as e:
            logger.exception(
                "Provider '%s' failed unexpectedly: %s",
                self.name,
                e,
                extra={"provider": self.name, "error_kind": "unexpected"},
            )
            return []

        if result.error is not None:
            if result.error.kind == "not_configured":
                logger.debug("Provider '%s' not configured; skipping", self.name)
            else:
                logger.error(
                    "Provider '%s' search failed (%s): %s",
                    self.name,
                    result.error.kind,
                    result.error.message,
                    extra={"provider": self.name, "error_kind": result.error.kind},
                )
            return []

        logger.info(
            "Provider '%s' returned %d results",
            self.name,
            len(result.sources),
            extra={"provider": self.name},
        )
        return result.sources

    def _parse_items(
        self,
        items: Iterable[Any],
        build: Callable[[Dict[str, Any]], Optional[SourceRecord]],
    ) -> List[SourceRecord]:
        """Build one record per raw item; a malformed item is skipped, not fatal."""
        sources: List[SourceRecord] = []
        for item in items:
            try:
                record = build(item)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(
                    "Failed to parse %s search result: %s",
                    self.name,
                    e,
                    extra={"provider": self.name, "error_kind": "parse"},
                )
                continue
            if record is not None:
                sources.append(record)
        return sources


def text_or_empty(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
