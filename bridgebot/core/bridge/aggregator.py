"""Concurrent, fail-isolated fan-out over bridge quote adapters."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from .errors import RouteUnsupportedError, describe_provider_error
from .models import BridgeRequest, Provider, Quote, QuoteOutcome

if TYPE_CHECKING:  # pragma: no cover
    from ...providers.base import BridgeQuoteAdapter, ProviderCredentials


class QuoteAggregator:
    """Queries every configured adapter and collects one outcome per adapter.

    Outcomes keep the configured adapter order regardless of completion
    order. A failing adapter only ever produces a ``success=False`` outcome;
    it never cancels or hides its siblings. Retries and timeouts belong to
    the adapters.
    """

    def __init__(
        self,
        adapters: Sequence["BridgeQuoteAdapter"],
        credentials: "ProviderCredentials",
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._adapters = list(adapters)
        self._credentials = credentials
        self._logger = logger or logging.getLogger(__name__)

    @property
    def providers(self) -> List[Provider]:
        return [adapter.name for adapter in self._adapters]

    async def aggregate(
        self,
        request: BridgeRequest,
        providers: Optional[Iterable[Provider]] = None,
    ) -> List[QuoteOutcome]:
        adapters = self._adapters
        if providers is not None:
            wanted = set(providers)
            adapters = [adapter for adapter in adapters if adapter.name in wanted]

        outcomes = await asyncio.gather(*(self._invoke(adapter, request) for adapter in adapters))
        succeeded = sum(1 for outcome in outcomes if outcome.success)
        self._logger.info(
            "Aggregated %d/%d bridge quotes for %s %s %s->%s",
            succeeded,
            len(outcomes),
            request.amount,
            request.token,
            request.from_chain,
            request.to_chain,
        )
        return list(outcomes)

    async def _invoke(self, adapter: "BridgeQuoteAdapter", request: BridgeRequest) -> QuoteOutcome:
        provider = adapter.name
        try:
            reason = adapter.unsupported_reason(request)
            if reason:
                return QuoteOutcome.failed(provider, reason)
            quote = await adapter.fetch_quote(request, self._credentials)
        except RouteUnsupportedError as exc:
            return QuoteOutcome.failed(provider, exc.message)
        except Exception as exc:
            self._logger.warning("%s quote failed: %s", provider.value, exc, exc_info=True)
            return QuoteOutcome.failed(provider, describe_provider_error(exc))

        if not isinstance(quote, Quote) or quote.provider != provider:
            self._logger.warning("%s returned a malformed quote: %r", provider.value, quote)
            return QuoteOutcome.failed(provider, "Malformed quote response")
        return QuoteOutcome.ok(provider, quote)
