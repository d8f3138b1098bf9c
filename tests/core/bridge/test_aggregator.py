import asyncio

import httpx
import pytest

from bridgebot.core.bridge.aggregator import QuoteAggregator
from bridgebot.core.bridge.errors import ProviderError, RouteUnsupportedError
from bridgebot.core.bridge.models import Provider
from bridgebot.providers.base import ProviderCredentials
from conftest import StaticAdapter, make_quote


def _aggregator(adapters):
    return QuoteAggregator(adapters, ProviderCredentials())


@pytest.mark.asyncio
async def test_one_outcome_per_adapter_in_configured_order(usdc_request, scenario_adapters):
    outcomes = await _aggregator(scenario_adapters).aggregate(usdc_request)

    assert [o.provider for o in outcomes] == [
        Provider.LIFI,
        Provider.HYPERLANE,
        Provider.SQUID,
        Provider.STARGATE,
    ]
    assert [o.success for o in outcomes] == [True, False, True, True]
    assert outcomes[1].error == "Route not supported"


@pytest.mark.asyncio
async def test_failing_adapter_does_not_affect_siblings(usdc_request):
    adapters = [
        StaticAdapter(Provider.LIFI, make_quote(Provider.LIFI, "9980000", "3.50", "0.20")),
        StaticAdapter(Provider.SQUID, error=RuntimeError("boom")),
        StaticAdapter(Provider.STARGATE, make_quote(Provider.STARGATE, "9994000", "0.106", "0.06")),
    ]

    outcomes = await _aggregator(adapters).aggregate(usdc_request)

    assert len(outcomes) == 3
    assert outcomes[0].success and outcomes[2].success
    assert not outcomes[1].success
    assert outcomes[1].error == "boom"
    assert outcomes[1].quote is None


@pytest.mark.asyncio
async def test_order_independent_of_completion(usdc_request):
    async def slow():
        await asyncio.sleep(0.05)

    adapters = [
        StaticAdapter(Provider.LIFI, make_quote(Provider.LIFI, "1000000", "1", "0"), hook=slow),
        StaticAdapter(Provider.SQUID, make_quote(Provider.SQUID, "1000000", "1", "0")),
    ]

    outcomes = await _aggregator(adapters).aggregate(usdc_request)

    assert [o.provider for o in outcomes] == [Provider.LIFI, Provider.SQUID]


@pytest.mark.asyncio
async def test_adapters_run_concurrently(usdc_request):
    arrived = asyncio.Event()
    started = []

    async def rendezvous():
        started.append(True)
        if len(started) == 2:
            arrived.set()
        # Sequential execution would never see the second adapter start
        await asyncio.wait_for(arrived.wait(), timeout=1)

    adapters = [
        StaticAdapter(Provider.LIFI, make_quote(Provider.LIFI, "1000000", "1", "0"), hook=rendezvous),
        StaticAdapter(Provider.SQUID, make_quote(Provider.SQUID, "1000000", "1", "0"), hook=rendezvous),
    ]

    outcomes = await _aggregator(adapters).aggregate(usdc_request)

    assert all(o.success for o in outcomes)


@pytest.mark.asyncio
async def test_unsupported_route_skips_network(usdc_request):
    adapter = StaticAdapter(Provider.HYPERLANE, unsupported="Route not supported")

    outcomes = await _aggregator([adapter]).aggregate(usdc_request)

    assert adapter.calls == 0
    assert outcomes[0].error == "Route not supported"


@pytest.mark.asyncio
async def test_route_unsupported_error_becomes_failure(usdc_request):
    adapter = StaticAdapter(Provider.STARGATE, error=RouteUnsupportedError("stargate"))

    outcomes = await _aggregator([adapter]).aggregate(usdc_request)

    assert outcomes[0].success is False
    assert outcomes[0].error == "Route not supported"


@pytest.mark.asyncio
async def test_provider_error_message_is_kept(usdc_request):
    adapter = StaticAdapter(Provider.STARGATE, error=ProviderError("stargate", "No routes available"))

    outcomes = await _aggregator([adapter]).aggregate(usdc_request)

    assert outcomes[0].error == "No routes available"


@pytest.mark.asyncio
async def test_http_status_error_is_summarized(usdc_request):
    request = httpx.Request("GET", "https://li.quest/v1/quote")
    response = httpx.Response(500, text="internal failure", request=request)
    error = httpx.HTTPStatusError("server error", request=request, response=response)
    adapter = StaticAdapter(Provider.LIFI, error=error)

    outcomes = await _aggregator([adapter]).aggregate(usdc_request)

    assert outcomes[0].error == "HTTP 500: internal failure"


@pytest.mark.asyncio
async def test_timeout_is_summarized(usdc_request):
    adapter = StaticAdapter(Provider.LIFI, error=httpx.ReadTimeout("timed out"))

    outcomes = await _aggregator([adapter]).aggregate(usdc_request)

    assert outcomes[0].error == "Request timed out"


@pytest.mark.asyncio
async def test_malformed_quote_is_failure(usdc_request):
    adapters = [
        StaticAdapter(Provider.LIFI, {"toAmount": "1"}),
        StaticAdapter(Provider.SQUID, make_quote(Provider.STARGATE, "1000000", "1", "0")),
    ]

    outcomes = await _aggregator(adapters).aggregate(usdc_request)

    assert [o.error for o in outcomes] == ["Malformed quote response", "Malformed quote response"]


@pytest.mark.asyncio
async def test_provider_filter_keeps_configured_order(usdc_request, scenario_adapters):
    aggregator = _aggregator(scenario_adapters)

    outcomes = await aggregator.aggregate(usdc_request, providers=[Provider.STARGATE, Provider.LIFI])

    assert [o.provider for o in outcomes] == [Provider.LIFI, Provider.STARGATE]
    assert scenario_adapters[2].calls == 0


@pytest.mark.asyncio
async def test_no_adapters_yields_empty_list(usdc_request):
    assert await _aggregator([]).aggregate(usdc_request) == []


def test_providers_property(scenario_adapters):
    assert _aggregator(scenario_adapters).providers == [
        Provider.LIFI,
        Provider.HYPERLANE,
        Provider.SQUID,
        Provider.STARGATE,
    ]
