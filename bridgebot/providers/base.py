"""Bridge quote adapter interface and shared HTTP/normalization helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

import httpx

from ..core.bridge.errors import ProviderError
from ..core.bridge.models import BridgeRequest, Provider, Quote


@dataclass(frozen=True)
class ProviderCredentials:
    """Keys and endpoints passed to every adapter invocation."""

    lifi_api_key: str = ""
    squid_integrator_id: str = ""
    across_integrator_id: str = ""
    rpc_urls: Dict[str, str] = field(default_factory=dict)
    eth_price_usd: Decimal = Decimal("3250")

    @classmethod
    def from_settings(cls, settings: Any) -> "ProviderCredentials":
        return cls(
            lifi_api_key=settings.lifi_api_key,
            squid_integrator_id=settings.squid_integrator_id,
            across_integrator_id=settings.across_integrator_id,
            rpc_urls=settings.rpc_urls(),
            eth_price_usd=settings.eth_price_usd,
        )


class BridgeQuoteAdapter(ABC):
    """Base adapter interface consumed by the aggregator."""

    name: Provider
    timeout_s: int = 20

    def unsupported_reason(self, request: BridgeRequest) -> Optional[str]:
        """Return a reason when this provider cannot serve the route at all."""
        if not request.dest_token_address:
            return f"Token {request.token} not supported on {request.to_chain}"
        return None

    @abstractmethod
    async def fetch_quote(self, request: BridgeRequest, credentials: ProviderCredentials) -> Quote:
        """Fetch and normalize a quote, raising ``ProviderError`` on failure."""

    @abstractmethod
    def normalize(self, payload: Dict[str, Any], request: BridgeRequest) -> Quote:
        """Map the provider response onto ``Quote``."""


class HttpBridgeAdapter(BridgeQuoteAdapter):
    """Adapter backed by a JSON HTTP API."""

    base_url: str = ""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if base_url:
            self.base_url = base_url.rstrip("/")
        if timeout_s is not None:
            self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self, credentials: ProviderCredentials) -> Dict[str, str]:
        return {"accept": "application/json"}

    async def _request(
        self,
        method: str,
        path: str,
        credentials: ProviderCredentials,
        *,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> Any:
        merged_headers = {**self._headers(credentials), **(headers or {})}
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, headers=merged_headers, **kwargs)
            response.raise_for_status()
            return response.json()


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return default


def decimal_to_str(value: Decimal) -> str:
    normalized = value.normalize()
    if normalized == normalized.to_integral():
        return str(normalized.quantize(Decimal("1")))
    return format(normalized, "f")


def usd_to_str(value: Decimal) -> str:
    """USD amounts keep at least cents; sub-cent precision is preserved."""
    normalized = value.normalize()
    if normalized.as_tuple().exponent >= -2:
        return str(value.quantize(Decimal("0.01")))
    return format(normalized, "f")


def sum_usd(items: Optional[Iterable[Dict[str, Any]]], key: str = "amountUSD") -> Decimal:
    total = Decimal("0")
    for item in items or []:
        if isinstance(item, dict):
            total += to_decimal(item.get(key))
    return total


def format_token_amount(units: Any, decimals: int, symbol: str, places: int = 6) -> str:
    human = to_decimal(units) / (Decimal(10) ** decimals)
    human = human.quantize(Decimal(1).scaleb(-places))
    return f"{decimal_to_str(human)} {symbol.upper()}"


def bridge_loss_percentage(from_units: Any, to_units: Any) -> str:
    sent = to_decimal(from_units)
    received = to_decimal(to_units)
    if sent <= 0:
        return "0.00"
    loss = (sent - received) / sent * Decimal(100)
    return str(loss.quantize(Decimal("0.01")))


def parse_int_units(provider: Provider, value: Any, field_name: str) -> str:
    """Validate an integer smallest-unit amount from a provider payload."""
    try:
        units = int(str(value))
    except (TypeError, ValueError):
        raise ProviderError(provider.value, f"Malformed {field_name} in response")
    if units < 0:
        raise ProviderError(provider.value, f"Negative {field_name} in response")
    return str(units)


def parse_duration(value: Any, default: int) -> int:
    try:
        seconds = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(seconds, 0)
