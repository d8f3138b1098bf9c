"""Static chain and token registry consumed by the parser and adapters."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class ChainConfig:
    name: str
    chain_id: int
    tokens: Dict[str, str] = field(default_factory=dict)
    rpc_url: Optional[str] = None

    def token_address(self, symbol: str) -> Optional[str]:
        return self.tokens.get(symbol.lower())


TOKEN_DECIMALS: Dict[str, int] = {
    'usdc': 6,
    'eth': 18,
}

# Tokens valued 1:1 in USD when pricing fees quoted in token units
STABLE_TOKENS = frozenset({'usdc'})

DEFAULT_CHAINS: Dict[str, ChainConfig] = {
    'base': ChainConfig(
        name='base',
        chain_id=8453,
        tokens={
            'usdc': '0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913',
            'eth': '0x4200000000000000000000000000000000000006',
        },
    ),
    'mantle': ChainConfig(
        name='mantle',
        chain_id=5000,
        tokens={
            'usdc': '0x09Bc4E0D864854c6aFB6eB9A9cdF58aC190D0dF9',
            'eth': '0xdEAddEaDdeadDEadDEADDEAddEADDEAddead1111',
        },
    ),
    'arbitrum': ChainConfig(
        name='arbitrum',
        chain_id=42161,
        tokens={
            'usdc': '0xaf88d065e77c8cC2239327C5EDb3A432268e5831',
            'eth': '0x82aF49447D8a07e3bd95BD0d56f35241523fBab1',
        },
    ),
    'ethereum': ChainConfig(
        name='ethereum',
        chain_id=1,
        tokens={
            'usdc': '0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48',
            'eth': '0x0000000000000000000000000000000000000000',
        },
    ),
    'optimism': ChainConfig(
        name='optimism',
        chain_id=10,
        tokens={
            'usdc': '0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85',
            'eth': '0x4200000000000000000000000000000000000006',
        },
    ),
}


class ChainRegistry:
    """Symbol-keyed lookup over a fixed set of chains.

    Usage:
        registry = ChainRegistry.from_rpc_urls(settings.rpc_urls())
        registry.get("base").chain_id        # 8453
        registry.token_address("base", "usdc")
    """

    def __init__(
        self,
        chains: Optional[Mapping[str, ChainConfig]] = None,
        *,
        token_decimals: Optional[Mapping[str, int]] = None,
    ) -> None:
        source = DEFAULT_CHAINS if chains is None else chains
        self._chains: Dict[str, ChainConfig] = {key.lower(): value for key, value in source.items()}
        self._decimals: Dict[str, int] = dict(TOKEN_DECIMALS if token_decimals is None else token_decimals)

    @classmethod
    def from_rpc_urls(cls, rpc_urls: Mapping[str, str]) -> "ChainRegistry":
        chains = {
            key: replace(config, rpc_url=rpc_urls.get(key) or config.rpc_url)
            for key, config in DEFAULT_CHAINS.items()
        }
        return cls(chains)

    def get(self, chain: str) -> Optional[ChainConfig]:
        return self._chains.get((chain or '').lower())

    def has_chain(self, chain: str) -> bool:
        return self.get(chain) is not None

    def token_address(self, chain: str, token: str) -> Optional[str]:
        config = self.get(chain)
        if config is None:
            return None
        return config.token_address(token)

    def token_decimals(self, token: str) -> int:
        return self._decimals.get(token.lower(), 6)

    def is_stable(self, token: str) -> bool:
        return token.lower() in STABLE_TOKENS

    def rpc_url(self, chain: str) -> Optional[str]:
        config = self.get(chain)
        return config.rpc_url if config else None

    @property
    def chain_names(self) -> List[str]:
        return list(self._chains)

    @property
    def token_symbols(self) -> List[str]:
        symbols: List[str] = []
        for config in self._chains.values():
            for symbol in config.tokens:
                if symbol not in symbols:
                    symbols.append(symbol)
        return symbols
