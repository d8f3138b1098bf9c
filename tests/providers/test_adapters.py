"""
Tests for the provider adapters.

HTTP is served by ``httpx.MockTransport`` so request shape and response
normalization are both checked without network access.
"""

import json
from decimal import Decimal

import httpx
import pytest

from bridgebot.core.bridge.errors import ProviderError
from bridgebot.core.bridge.models import Provider
from bridgebot.providers import (
    AcrossAdapter,
    HyperlaneAdapter,
    LiFiAdapter,
    SquidAdapter,
    StargateAdapter,
    build_default_adapters,
)
from bridgebot.providers.base import ProviderCredentials, bridge_loss_percentage, usd_to_str


def _transport(handler, seen):
    def wrapped(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return httpx.MockTransport(wrapped)


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("3.5", "3.50"),
            ("0", "0.00"),
            ("10", "10.00"),
            ("0.106", "0.106"),
            ("1.230000", "1.23"),
        ],
    )
    def test_usd_to_str(self, value, expected):
        assert usd_to_str(Decimal(value)) == expected

    def test_bridge_loss_percentage(self):
        assert bridge_loss_percentage("10000000", "9980000") == "0.20"
        assert bridge_loss_percentage("0", "1") == "0.00"


# =============================================================================
# LiFi
# =============================================================================

LIFI_RESPONSE = {
    "action": {"fromAmount": "10000000"},
    "estimate": {
        "fromAmount": "10000000",
        "toAmount": "9980000",
        "executionDuration": 45,
        "gasCosts": [{"amountUSD": "3.50"}, {"amountUSD": "0.25"}],
        "feeCosts": [],
    },
}


class TestLiFi:

    @pytest.mark.asyncio
    async def test_fetch_quote(self, usdc_request):
        seen = []
        adapter = LiFiAdapter(transport=_transport(lambda r: httpx.Response(200, json=LIFI_RESPONSE), seen))

        quote = await adapter.fetch_quote(usdc_request, ProviderCredentials(lifi_api_key="k-123"))

        sent = seen[0]
        assert sent.method == "GET"
        assert sent.url.path == "/v1/quote"
        assert sent.url.params["fromChain"] == "8453"
        assert sent.url.params["toChain"] == "5000"
        assert sent.url.params["fromAmount"] == "10000000"
        assert sent.headers["x-lifi-api-key"] == "k-123"

        assert quote.provider is Provider.LIFI
        assert quote.dest_amount == "9980000"
        assert quote.dest_amount_formatted == "9.98 USDC"
        assert quote.gas_fee_usd == "3.50"
        assert quote.fee_costs_usd is None
        assert quote.total_fees_usd is None
        assert quote.bridge_loss_percentage == "0.20"
        assert quote.duration_seconds == 45

    def test_fee_costs_add_total(self, usdc_request):
        payload = {
            "estimate": {
                **LIFI_RESPONSE["estimate"],
                "feeCosts": [{"amountUSD": "0.30"}, {"amountUSD": "0.20"}],
            }
        }

        quote = LiFiAdapter().normalize(payload, usdc_request)

        assert quote.fee_costs_usd == "0.50"
        assert quote.total_fees_usd == "4.00"

    def test_missing_to_amount(self, usdc_request):
        with pytest.raises(ProviderError):
            LiFiAdapter().normalize({"estimate": {}}, usdc_request)

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, usdc_request):
        seen = []
        adapter = LiFiAdapter(transport=_transport(lambda r: httpx.Response(500, text="down"), seen))

        with pytest.raises(httpx.HTTPStatusError):
            await adapter.fetch_quote(usdc_request, ProviderCredentials())

    @pytest.mark.asyncio
    async def test_missing_route_is_not_retried(self, usdc_request):
        seen = []
        adapter = LiFiAdapter(transport=_transport(lambda r: httpx.Response(404, text="nope"), seen))

        with pytest.raises(httpx.HTTPStatusError):
            await adapter.fetch_quote(usdc_request, ProviderCredentials())

        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_connection_error_propagates(self, usdc_request):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        adapter = LiFiAdapter(transport=_transport(refuse, []))

        with pytest.raises(httpx.ConnectError):
            await adapter.fetch_quote(usdc_request, ProviderCredentials())

    @pytest.mark.asyncio
    async def test_base_url_override(self, usdc_request):
        seen = []
        adapter = LiFiAdapter(
            base_url="https://lifi.internal/",
            transport=_transport(lambda r: httpx.Response(200, json=LIFI_RESPONSE), seen),
        )

        await adapter.fetch_quote(usdc_request, ProviderCredentials())

        assert adapter.base_url == "https://lifi.internal"
        assert seen[0].url.host == "lifi.internal"
        assert seen[0].url.path == "/v1/quote"


# =============================================================================
# Squid
# =============================================================================

SQUID_RESPONSE = {
    "route": {
        "estimate": {
            "fromAmount": "10000000",
            "toAmount": "9950000",
            "estimatedRouteDuration": 90,
            "gasCosts": [{"amountUSD": "4.90"}],
            "feeCosts": [{"amountUSD": "0.06"}, {"amountUSD": "0.04"}],
        }
    }
}


class TestSquid:

    @pytest.mark.asyncio
    async def test_fetch_quote(self, usdc_request):
        seen = []
        adapter = SquidAdapter(transport=_transport(lambda r: httpx.Response(200, json=SQUID_RESPONSE), seen))

        quote = await adapter.fetch_quote(usdc_request, ProviderCredentials())

        sent = seen[0]
        assert sent.method == "POST"
        assert sent.url.path == "/v2/route"
        assert sent.headers["x-integrator-id"] == "test"
        body = json.loads(sent.content)
        assert body["fromChain"] == "8453"
        assert body["toChain"] == "5000"
        assert body["fromAmount"] == "10000000"
        assert body["toToken"] == usdc_request.dest_token_address

        assert quote.dest_amount == "9950000"
        assert quote.gas_fee_usd == "4.90"
        assert quote.fee_costs_usd == "0.10"
        assert quote.total_fees_usd == "5.00"
        assert quote.bridge_loss_percentage == "0.50"
        assert quote.duration_seconds == 90

    @pytest.mark.asyncio
    async def test_configured_integrator_id(self, usdc_request):
        seen = []
        adapter = SquidAdapter(transport=_transport(lambda r: httpx.Response(200, json=SQUID_RESPONSE), seen))

        await adapter.fetch_quote(usdc_request, ProviderCredentials(squid_integrator_id="my-app"))

        assert seen[0].headers["x-integrator-id"] == "my-app"

    def test_missing_estimate(self, usdc_request):
        with pytest.raises(ProviderError):
            SquidAdapter().normalize({"route": {}}, usdc_request)


# =============================================================================
# Stargate
# =============================================================================

STARGATE_RESPONSE = {
    "quotes": [
        {
            "route": "stargate/v2/taxi",
            "srcAmount": "10000000",
            "dstAmount": "9994000",
            "duration": {"estimated": 120},
            "fees": [{"amountUSD": "0.1"}, {"amountUSD": "0.006"}],
            "error": None,
        }
    ]
}


class TestStargate:

    @pytest.mark.asyncio
    async def test_fetch_quote(self, usdc_request):
        seen = []
        adapter = StargateAdapter(transport=_transport(lambda r: httpx.Response(200, json=STARGATE_RESPONSE), seen))

        quote = await adapter.fetch_quote(usdc_request, ProviderCredentials())

        params = seen[0].url.params
        assert seen[0].url.path == "/api/v1/quotes"
        assert params["srcChainKey"] == "base"
        assert params["dstChainKey"] == "mantle"
        assert params["srcAmount"] == "10000000"
        assert params["dstAmountMin"] == "9500000"

        assert quote.dest_amount == "9994000"
        assert quote.gas_fee_usd == "0.106"
        assert quote.bridge_loss_percentage == "0.06"
        assert quote.duration_seconds == 120

    def test_no_routes(self, usdc_request):
        with pytest.raises(ProviderError) as exc:
            StargateAdapter().normalize({"quotes": []}, usdc_request)

        assert exc.value.message == "No routes available"

    def test_quote_error(self, usdc_request):
        payload = {"quotes": [{"error": {"message": "Insufficient liquidity"}}]}

        with pytest.raises(ProviderError) as exc:
            StargateAdapter().normalize(payload, usdc_request)

        assert exc.value.message == "Insufficient liquidity"


# =============================================================================
# Hyperlane
# =============================================================================

class TestHyperlane:

    def test_only_warp_routes_supported(self, parser):
        adapter = HyperlaneAdapter()

        assert adapter.unsupported_reason(parser.reconstruct("10", "usdc", "base", "mantle")) == "Route not supported"
        assert adapter.unsupported_reason(parser.reconstruct("1", "eth", "base", "arbitrum")) == "Route not supported"
        assert adapter.unsupported_reason(parser.reconstruct("10", "usdc", "base", "arbitrum")) is None

    @pytest.mark.asyncio
    async def test_fetch_quote_prices_gas(self, parser):
        seen = []

        def handler(request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": hex(10_000_000)})

        adapter = HyperlaneAdapter(transport=_transport(handler, seen))
        request = parser.reconstruct("10", "usdc", "base", "arbitrum")
        credentials = ProviderCredentials(
            rpc_urls={"base": "https://base.rpc.test"},
            eth_price_usd=Decimal("3250"),
        )

        quote = await adapter.fetch_quote(request, credentials)

        assert seen[0].url.host == "base.rpc.test"
        assert json.loads(seen[0].content)["method"] == "eth_gasPrice"
        # 300k gas at 0.01 gwei is 0.000003 ETH
        assert quote.gas_fee_usd == "0.01"
        assert quote.dest_amount == "10000000"
        assert quote.bridge_loss_percentage == "0.00"
        assert quote.duration_seconds == 300

    @pytest.mark.asyncio
    async def test_rpc_error(self, parser):
        seen = []
        adapter = HyperlaneAdapter(
            transport=_transport(lambda r: httpx.Response(200, json={"error": {"message": "nope"}}), seen)
        )
        request = parser.reconstruct("10", "usdc", "base", "arbitrum")

        with pytest.raises(ProviderError):
            await adapter.fetch_quote(request, ProviderCredentials(rpc_urls={"base": "https://base.rpc.test"}))

    @pytest.mark.asyncio
    async def test_missing_rpc_url(self, parser):
        request = parser.reconstruct("10", "usdc", "base", "arbitrum")

        with pytest.raises(ProviderError):
            await HyperlaneAdapter().fetch_quote(request, ProviderCredentials())


# =============================================================================
# Across
# =============================================================================

ACROSS_RESPONSE = {
    "estimatedFillTimeSec": 4,
    "outputAmount": "9990000",
    "totalRelayFee": {"pct": "1000000000000000", "total": "10000"},
    "relayerGasFee": {"pct": "500000000000000", "total": "5000"},
    "isAmountTooLow": False,
}


class TestAcross:

    @pytest.mark.asyncio
    async def test_fetch_quote(self, usdc_request):
        seen = []
        adapter = AcrossAdapter(transport=_transport(lambda r: httpx.Response(200, json=ACROSS_RESPONSE), seen))

        quote = await adapter.fetch_quote(usdc_request, ProviderCredentials())

        params = seen[0].url.params
        assert seen[0].url.path == "/api/suggested-fees"
        assert params["originChainId"] == "8453"
        assert params["destinationChainId"] == "5000"
        assert params["amount"] == "10000000"
        assert "integratorId" not in params

        assert quote.dest_amount == "9990000"
        assert quote.gas_fee_usd == "0.005"
        assert quote.total_fees_usd == "0.01"
        assert quote.bridge_loss_percentage == "0.10"
        assert quote.duration_seconds == 4

    def test_output_derived_from_relay_fee(self, usdc_request):
        payload = {k: v for k, v in ACROSS_RESPONSE.items() if k != "outputAmount"}

        quote = AcrossAdapter().normalize(payload, usdc_request)

        assert quote.dest_amount == "9990000"

    def test_amount_too_low(self, usdc_request):
        with pytest.raises(ProviderError):
            AcrossAdapter().normalize({**ACROSS_RESPONSE, "isAmountTooLow": True}, usdc_request)


# =============================================================================
# Wiring
# =============================================================================

class _Toggles:
    provider_timeout_seconds = 7
    enabled_providers = ["lifi", "stargate", "across"]


def test_build_default_adapters_follows_toggles():
    adapters = build_default_adapters(_Toggles())

    assert [adapter.name for adapter in adapters] == [Provider.LIFI, Provider.STARGATE, Provider.ACROSS]
    assert all(adapter.timeout_s == 7 for adapter in adapters)
