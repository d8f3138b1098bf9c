"""Turns free-text bridge commands into validated ``BridgeRequest`` values."""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from .errors import BridgeError, ParseError, ValidationError
from .models import BridgeRequest
from .registry import ChainRegistry

BRIDGE_COMMAND_RE = re.compile(
    r'^\s*/?bridge(?:@\w+)?\s+(\d+(?:\.\d+)?)\s+([a-z0-9]+)\s+from\s+([a-z0-9]+)\s+to\s+([a-z0-9]+)\s*$',
    re.IGNORECASE,
)

# Keeps encoded action tokens within the 64-byte callback budget
MAX_AMOUNT_LENGTH = 20


class BridgeCommandParser:
    """Parses ``bridge <amount> <token> from <chain> to <chain>``.

    The parser never raises on bad input; ``parse`` and ``reconstruct`` return
    ``None`` and ``try_parse`` hands back the reason for logging.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        *,
        user_address: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._registry = registry
        self._user_address = user_address
        self._logger = logger or logging.getLogger(__name__)

    @property
    def registry(self) -> ChainRegistry:
        return self._registry

    def parse(self, text: str) -> Optional[BridgeRequest]:
        request, error = self.try_parse(text)
        if error is not None and not isinstance(error, ParseError):
            self._logger.info("Rejected bridge command %r: %s", text, error.message)
        return request

    def try_parse(self, text: str) -> Tuple[Optional[BridgeRequest], Optional[BridgeError]]:
        match = BRIDGE_COMMAND_RE.match(text or '')
        if not match:
            return None, ParseError('Text is not a bridge command')
        amount, token, from_chain, to_chain = match.groups()
        try:
            return self._build(amount, token, from_chain, to_chain), None
        except ValidationError as exc:
            return None, exc

    def reconstruct(
        self,
        amount: str,
        token: str,
        from_chain: str,
        to_chain: str,
    ) -> Optional[BridgeRequest]:
        """Rebuild a request from already-encoded primitives (action tokens)."""

        try:
            return self._build(amount, token, from_chain, to_chain)
        except ValidationError as exc:
            self._logger.info("Could not rebuild bridge request: %s", exc.message)
            return None

    def _build(self, amount: str, token: str, from_chain: str, to_chain: str) -> BridgeRequest:
        amount = (amount or '').strip()
        token = (token or '').strip().lower()
        from_chain = (from_chain or '').strip().lower()
        to_chain = (to_chain or '').strip().lower()

        from_config = self._registry.get(from_chain)
        to_config = self._registry.get(to_chain)
        if from_config is None or to_config is None:
            missing = from_chain if from_config is None else to_chain
            raise ValidationError(f'Unsupported chain: {missing}')

        token_address = from_config.token_address(token)
        if not token_address:
            raise ValidationError(f'Token {token} is not supported on {from_chain}')

        if from_chain == to_chain:
            raise ValidationError('Source and destination chains must differ')
        decimals = self._registry.token_decimals(token)
        self._validate_amount(amount, token, decimals)

        return BridgeRequest(
            amount=amount,
            token=token,
            from_chain=from_chain,
            to_chain=to_chain,
            from_chain_id=from_config.chain_id,
            to_chain_id=to_config.chain_id,
            token_address=token_address,
            user_address=self._user_address,
            dest_token_address=to_config.token_address(token),
            decimals=decimals,
        )

    @staticmethod
    def _validate_amount(amount: str, token: str, decimals: int) -> None:
        if not amount or len(amount) > MAX_AMOUNT_LENGTH:
            raise ValidationError('Amount is missing or too long')
        if not re.fullmatch(r'\d+(?:\.\d+)?', amount):
            raise ValidationError(f'Invalid amount: {amount}')
        try:
            value = Decimal(amount)
        except InvalidOperation:
            raise ValidationError(f'Invalid amount: {amount}')
        if value <= 0:
            raise ValidationError('Amount must be positive')
        # Anything finer than one base unit would be quoted as zero
        places = max(0, -value.normalize().as_tuple().exponent)
        if places > decimals:
            raise ValidationError(
                f'Amount {amount} has more than {decimals} decimal places for {token.upper()}'
            )
