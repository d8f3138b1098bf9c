"""Bridge provider adapters."""

from typing import Any, List

from .across import AcrossAdapter
from .base import BridgeQuoteAdapter, HttpBridgeAdapter, ProviderCredentials
from .hyperlane import HyperlaneAdapter
from .lifi import LiFiAdapter
from .squid import SquidAdapter
from .stargate import StargateAdapter

ADAPTER_CLASSES = {
    "lifi": LiFiAdapter,
    "hyperlane": HyperlaneAdapter,
    "squid": SquidAdapter,
    "stargate": StargateAdapter,
    "across": AcrossAdapter,
}


def build_default_adapters(settings: Any) -> List[BridgeQuoteAdapter]:
    """Instantiate the adapters enabled in settings, in display order."""

    return [
        ADAPTER_CLASSES[name](timeout_s=settings.provider_timeout_seconds)
        for name in settings.enabled_providers
    ]


__all__ = [
    "AcrossAdapter",
    "BridgeQuoteAdapter",
    "HttpBridgeAdapter",
    "HyperlaneAdapter",
    "LiFiAdapter",
    "ProviderCredentials",
    "SquidAdapter",
    "StargateAdapter",
    "build_default_adapters",
]
