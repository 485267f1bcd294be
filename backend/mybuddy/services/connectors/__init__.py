from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import httpx

from .base import BaseConnector, ProviderError, ProviderResult
from .bing import BingSearchConnector
from .duckduckgo import DuckDuckGoConnector
from .google import GoogleSearchConnector
from ...core.config import ProviderConfig

__all__ = [
    "BaseConnector",
    "BingSearchConnector",
    "ConnectorSet",
    "DuckDuckGoConnector",
    "GoogleSearchConnector",
    "ProviderError",
    "ProviderResult",
    "build_connectors",
]


@dataclass
class ConnectorSet:
    """
    Keyed providers in priority order, plus the free fallback.

    The position in `keyed` is the merge order used by the aggregator.
    """

    keyed: List[BaseConnector]
    fallback: Optional[BaseConnector] = None

    def describe(self) -> List[tuple[str, bool]]:
        connectors = list(self.keyed)
        if self.fallback is not None:
            connectors.append(self.fallback)
        return [(c.name, c.is_configured) for c in connectors]


def build_connectors(
    config: ProviderConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ConnectorSet:
    return ConnectorSet(
        keyed=[
            GoogleSearchConnector(
                api_key=config.google_api_key,
                search_engine_id=config.google_search_engine_id,
                timeout=config.timeout_seconds,
                transport=transport,
            ),
            BingSearchConnector(
                api_key=config.bing_api_key,
                timeout=config.timeout_seconds,
                transport=transport,
            ),
        ],
        fallback=DuckDuckGoConnector(
            enabled=config.duckduckgo_enabled,
            timeout=config.timeout_seconds,
            transport=transport,
        ),
    )
