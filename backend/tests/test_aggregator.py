"""
Tests for aggregator.py - provider gating, merge order, dedup, sort, truncate.
"""
import math

import pytest

from mybuddy.core.config import ProviderConfig
from mybuddy.services.aggregator import SearchAggregator, dedupe_by_url, sort_by_relevance
from mybuddy.services.connectors import ConnectorSet

from tests.fixtures.search_fixtures import FakeConnector, make_source


def make_aggregator(keyed, fallback=None):
    return SearchAggregator(ProviderConfig(), connectors=ConnectorSet(keyed=keyed, fallback=fallback))


class TestDedupeAndSort:

    def test_first_occurrence_wins(self):
        """Scenario A: two records with url "a" collapse to the first one."""
        first = make_source("a", 0.9)
        second = make_source("a", 0.5)
        assert dedupe_by_url([first, second]) == [first]

    def test_sort_is_descending_and_stable(self):
        a = make_source("a", 0.5)
        b = make_source("b", 0.9)
        c = make_source("c", 0.5)
        assert sort_by_relevance([a, b, c]) == [b, a, c]

    def test_nan_scores_sort_last(self):
        nan = make_source("nan", math.nan)
        low = make_source("low", 0.1)
        high = make_source("high", 0.9)
        assert [s.url for s in sort_by_relevance([nan, low, high])] == ["high", "low", "nan"]


class TestAggregate:

    @pytest.mark.asyncio
    async def test_scenario_a_dedup_in_aggregation(self):
        google = FakeConnector("google", [make_source("a", 0.9), make_source("a", 0.5)])
        agg = make_aggregator([google])

        results = await agg.aggregate("q", 10)
        assert len(results) == 1
        assert results[0].relevance_score == 0.9

    @pytest.mark.asyncio
    async def test_both_keyed_providers_are_used(self):
        google = FakeConnector("google", [make_source("g1", 0.6)])
        bing = FakeConnector("bing", [make_source("b1", 0.8)])
        fallback = FakeConnector("duckduckgo", [make_source("d1", 0.95)])
        agg = make_aggregator([google, bing], fallback)

        results = await agg.aggregate("q", 10)
        assert [s.url for s in results] == ["b1", "g1"]
        assert fallback.calls == []

    @pytest.mark.asyncio
    async def test_duplicate_across_providers_keeps_priority_order(self):
        """The same url from Google and Bing keeps Google's record regardless of timing."""
        google = FakeConnector("google", [make_source("same", 0.6, title="from google")])
        bing = FakeConnector("bing", [make_source("same", 0.9, title="from bing")])
        agg = make_aggregator([google, bing])

        results = await agg.aggregate("q", 10)
        assert [s.title for s in results] == ["from google"]

    @pytest.mark.asyncio
    async def test_unconfigured_providers_are_skipped(self):
        google = FakeConnector("google", [make_source("g1")], configured=False)
        bing = FakeConnector("bing", [make_source("b1")])
        agg = make_aggregator([google, bing])

        results = await agg.aggregate("q", 10)
        assert [s.url for s in results] == ["b1"]
        assert google.calls == []

    @pytest.mark.asyncio
    async def test_fallback_only_when_keyed_results_empty(self):
        google = FakeConnector("google", [])
        fallback = FakeConnector("duckduckgo", [make_source("d1", 0.95)])
        agg = make_aggregator([google], fallback)

        results = await agg.aggregate("q", 10)
        assert [s.url for s in results] == ["d1"]
        assert fallback.calls == [("q", 10)]

    @pytest.mark.asyncio
    async def test_fallback_when_nothing_configured(self):
        google = FakeConnector("google", configured=False)
        fallback = FakeConnector("duckduckgo", [make_source("d1")])
        agg = make_aggregator([google], fallback)

        assert [s.url for s in await agg.aggregate("q", 10)] == ["d1"]

    @pytest.mark.asyncio
    async def test_disabled_fallback_is_not_called(self):
        fallback = FakeConnector("duckduckgo", [make_source("d1")], configured=False)
        agg = make_aggregator([FakeConnector("google", [])], fallback)

        assert await agg.aggregate("q", 10) == []
        assert fallback.calls == []

    @pytest.mark.asyncio
    async def test_unexpected_error_falls_back_once(self):
        google = FakeConnector("google", raises=RuntimeError("boom"))
        fallback = FakeConnector("duckduckgo", [make_source("d1")])
        agg = make_aggregator([google], fallback)

        results = await agg.aggregate("q", 10)
        assert [s.url for s in results] == ["d1"]
        assert len(fallback.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_without_fallback_returns_empty(self):
        google = FakeConnector("google", raises=RuntimeError("boom"))
        agg = make_aggregator([google])

        assert await agg.aggregate("q", 10) == []

    @pytest.mark.asyncio
    async def test_failing_fallback_is_swallowed(self):
        google = FakeConnector("google", raises=RuntimeError("boom"))
        fallback = FakeConnector("duckduckgo", raises=RuntimeError("also boom"))
        agg = make_aggregator([google], fallback)

        assert await agg.aggregate("q", 10) == []

    @pytest.mark.asyncio
    async def test_failing_fallback_is_not_retried(self):
        google = FakeConnector("google", [])
        fallback = FakeConnector("duckduckgo", raises=RuntimeError("down"))
        agg = make_aggregator([google], fallback)

        assert await agg.aggregate("q", 10) == []
        assert len(fallback.calls) == 1

    @pytest.mark.asyncio
    async def test_error_after_fallback_does_not_call_it_again(self, monkeypatch):
        google = FakeConnector("google", [])
        fallback = FakeConnector("duckduckgo", [make_source("d1")])
        agg = make_aggregator([google], fallback)

        def broken_finalize(sources, max_results):
            raise ValueError("finalize failed")

        monkeypatch.setattr(agg, "_finalize", broken_finalize)

        assert await agg.aggregate("q", 10) == []
        assert len(fallback.calls) == 1

    @pytest.mark.asyncio
    async def test_truncates_to_max_results(self):
        google = FakeConnector("google", [make_source(f"u{i}", i / 10) for i in range(10)])
        agg = make_aggregator([google])

        results = await agg.aggregate("q", 3)
        assert [s.url for s in results] == ["u9", "u8", "u7"]

    @pytest.mark.asyncio
    async def test_passes_query_and_limit_to_providers(self):
        google = FakeConnector("google", [])
        bing = FakeConnector("bing", [])
        agg = make_aggregator([google, bing])

        await agg.aggregate("python asyncio", 15)
        assert google.calls == [("python asyncio", 15)]
        assert bing.calls == [("python asyncio", 15)]
