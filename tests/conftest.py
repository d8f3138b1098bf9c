"""Shared fixtures for the bridge quote tests."""

from typing import Any, Callable, Optional

import pytest

from bridgebot.core.bridge.aggregator import QuoteAggregator
from bridgebot.core.bridge.models import BridgeRequest, Provider, Quote
from bridgebot.core.bridge.parser import BridgeCommandParser
from bridgebot.core.bridge.registry import ChainRegistry
from bridgebot.core.bridge.service import BridgeQuoteService
from bridgebot.providers.base import BridgeQuoteAdapter, ProviderCredentials

USER_ADDRESS = "0xA830Cd34D83C10Ba3A8bB2F25ff8BBae9BcD0125"


def make_quote(
    provider: Provider,
    dest_amount: str,
    gas_fee_usd: str,
    loss: str,
    *,
    total_fees_usd: Optional[str] = None,
    fee_costs_usd: Optional[str] = None,
    duration_seconds: int = 60,
    decimals: int = 6,
) -> Quote:
    human = int(dest_amount) / 10 ** decimals
    return Quote(
        provider=provider,
        dest_amount=dest_amount,
        dest_amount_formatted=f"{human:g} USDC",
        duration_seconds=duration_seconds,
        gas_fee_usd=gas_fee_usd,
        bridge_loss_percentage=loss,
        dest_decimals=decimals,
        total_fees_usd=total_fees_usd,
        fee_costs_usd=fee_costs_usd,
    )


class StaticAdapter(BridgeQuoteAdapter):
    """Adapter returning a canned quote, raising, or running a coroutine."""

    def __init__(
        self,
        name: Provider,
        result: Any = None,
        *,
        error: Optional[BaseException] = None,
        hook: Optional[Callable] = None,
        unsupported: Optional[str] = None,
    ) -> None:
        self.name = name
        self.result = result
        self.error = error
        self.hook = hook
        self.unsupported = unsupported
        self.calls = 0

    def unsupported_reason(self, request: BridgeRequest) -> Optional[str]:
        return self.unsupported

    async def fetch_quote(self, request: BridgeRequest, credentials: ProviderCredentials) -> Quote:
        self.calls += 1
        if self.hook is not None:
            await self.hook()
        if self.error is not None:
            raise self.error
        return self.result

    def normalize(self, payload, request):
        return payload


@pytest.fixture
def registry():
    return ChainRegistry()


@pytest.fixture
def parser(registry):
    return BridgeCommandParser(registry, user_address=USER_ADDRESS)


@pytest.fixture
def usdc_request(parser):
    """10 USDC from base to mantle."""
    return parser.reconstruct("10", "usdc", "base", "mantle")


@pytest.fixture
def scenario_quotes():
    """LiFi, Squid and Stargate quotes for 10 USDC base -> mantle."""
    return {
        Provider.LIFI: make_quote(Provider.LIFI, "9980000", "3.50", "0.20", duration_seconds=45),
        Provider.SQUID: make_quote(
            Provider.SQUID,
            "9950000",
            "4.90",
            "0.50",
            fee_costs_usd="0.10",
            total_fees_usd="5.00",
            duration_seconds=90,
        ),
        Provider.STARGATE: make_quote(Provider.STARGATE, "9994000", "0.106", "0.06", duration_seconds=120),
    }


@pytest.fixture
def scenario_adapters(scenario_quotes):
    return [
        StaticAdapter(Provider.LIFI, scenario_quotes[Provider.LIFI]),
        StaticAdapter(Provider.HYPERLANE, unsupported="Route not supported"),
        StaticAdapter(Provider.SQUID, scenario_quotes[Provider.SQUID]),
        StaticAdapter(Provider.STARGATE, scenario_quotes[Provider.STARGATE]),
    ]


@pytest.fixture
def bridge_service(parser, scenario_adapters):
    aggregator = QuoteAggregator(scenario_adapters, ProviderCredentials())
    return BridgeQuoteService(parser, aggregator)
