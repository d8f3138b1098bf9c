"""BridgeQuoteService drives one chat interaction from text or action token to display payload."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ...logging_config import bound_route
from .aggregator import QuoteAggregator
from .encoder import (
    decode_action,
    render_confirmation,
    render_help,
    render_invalid_action,
    render_quotes,
    render_usage,
)
from .errors import TokenDecodeError
from .models import ActionKind, BridgeRequest, DisplayPayload, Provider, QuoteOutcome, RankedResult
from .parser import BridgeCommandParser
from .ranking import rank_quotes


class BridgeQuoteService:
    """Stateless glue between the parser, aggregator, ranking and encoder.

    Nothing is remembered between calls: follow-up actions rebuild the
    request from the action token and the static registry.
    """

    def __init__(
        self,
        parser: BridgeCommandParser,
        aggregator: QuoteAggregator,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._parser = parser
        self._aggregator = aggregator
        self._logger = logger or logging.getLogger(__name__)

    @property
    def parser(self) -> BridgeCommandParser:
        return self._parser

    @property
    def providers(self) -> List[Provider]:
        return self._aggregator.providers

    async def quote(self, request: BridgeRequest) -> RankedResult:
        with bound_route(request.amount, request.token, request.from_chain, request.to_chain):
            outcomes = await self._aggregator.aggregate(request)
        return rank_quotes(outcomes)

    async def quote_text(self, text: str) -> Optional[Tuple[BridgeRequest, RankedResult]]:
        request = self._parser.parse(text)
        if request is None:
            return None
        return request, await self.quote(request)

    def usage(self) -> DisplayPayload:
        registry = self._parser.registry
        return render_usage(registry.chain_names, registry.token_symbols)

    def help(self) -> DisplayPayload:
        registry = self._parser.registry
        return render_help(registry.chain_names, registry.token_symbols)

    async def handle_text(self, text: str) -> DisplayPayload:
        parsed = await self.quote_text(text)
        if parsed is None:
            return self.usage()
        request, result = parsed
        return render_quotes(request, result)

    async def handle_action(self, data: str) -> DisplayPayload:
        try:
            token = decode_action(data)
        except TokenDecodeError as exc:
            self._logger.info("Rejected action token %r: %s", data, exc.message)
            return render_invalid_action()

        request = self._parser.reconstruct(token.amount, token.token, token.from_chain, token.to_chain)
        if request is None:
            return render_invalid_action()

        if token.action is ActionKind.REFRESH:
            return render_quotes(request, await self.quote(request))

        with bound_route(request.amount, request.token, request.from_chain, request.to_chain):
            outcomes = await self._aggregator.aggregate(request, providers=[token.provider])
        if not outcomes:
            outcome = QuoteOutcome.failed(token.provider, "Provider is not enabled")
        else:
            outcome = outcomes[0]
        return render_confirmation(request, outcome)


def build_bridge_service(settings) -> BridgeQuoteService:
    """Wire a service from settings with the default adapters."""

    from ...providers import ProviderCredentials, build_default_adapters
    from .registry import ChainRegistry

    registry = ChainRegistry.from_rpc_urls(settings.rpc_urls())
    parser = BridgeCommandParser(registry, user_address=settings.default_user_address)
    aggregator = QuoteAggregator(
        build_default_adapters(settings),
        ProviderCredentials.from_settings(settings),
    )
    return BridgeQuoteService(parser, aggregator)
