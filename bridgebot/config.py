from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Telegram
    telegram_bot_token: str = Field(
        default="",
        description="Bot API token issued by BotFather",
        validation_alias=AliasChoices("telegram_bot_token", "bot_token", "TELEGRAM_BOT_TOKEN", "BOT_TOKEN"),
    )
    telegram_webhook_secret: str = Field(
        default="",
        description="Expected X-Telegram-Bot-Api-Secret-Token header on webhook calls",
    )
    telegram_chat_id: str = Field(
        default="",
        description="Default chat for outbound notifications",
        validation_alias=AliasChoices("telegram_chat_id", "tg_chat_id", "TELEGRAM_CHAT_ID", "TG_CHAT_ID"),
    )

    # Quote defaults
    default_user_address: str = Field(
        default="0xA830Cd34D83C10Ba3A8bB2F25ff8BBae9BcD0125",
        description="Address used as sender/recipient when requesting quotes",
    )
    eth_price_usd: Decimal = Field(
        default=Decimal("3250"),
        description="Reference ETH/USD price used to value gas estimates",
    )
    provider_timeout_seconds: int = Field(default=20, ge=1, description="Per-provider HTTP timeout")

    # Provider credentials
    lifi_api_key: str = Field(default="", description="Optional LiFi API key")
    squid_integrator_id: str = Field(
        default="",
        description="Squid integrator id",
        validation_alias=AliasChoices("squid_integrator_id", "integrator_id", "SQUID_INTEGRATOR_ID", "INTEGRATOR_ID"),
    )
    across_integrator_id: str = Field(default="", description="Across integrator id (2-byte hex)")

    # RPC endpoints
    base_rpc_url: str = Field(default="https://mainnet.base.org", description="Base RPC URL")
    arbitrum_rpc_url: str = Field(default="https://arb1.arbitrum.io/rpc", description="Arbitrum RPC URL")
    mantle_rpc_url: str = Field(default="https://rpc.mantle.xyz", description="Mantle RPC URL")
    ethereum_rpc_url: str = Field(default="https://eth.llamarpc.com", description="Ethereum RPC URL")
    optimism_rpc_url: str = Field(default="https://mainnet.optimism.io", description="Optimism RPC URL")

    # Provider Toggles
    enable_lifi: bool = Field(default=True, description="Enable LiFi quotes")
    enable_hyperlane: bool = Field(default=True, description="Enable Hyperlane warp route quotes")
    enable_squid: bool = Field(default=True, description="Enable Squid quotes")
    enable_stargate: bool = Field(default=True, description="Enable Stargate quotes")
    enable_across: bool = Field(default=True, description="Enable Across quotes")

    @property
    def has_telegram_token(self) -> bool:
        return bool(self.telegram_bot_token)

    @property
    def enabled_providers(self) -> List[str]:
        toggles = [
            ("lifi", self.enable_lifi),
            ("hyperlane", self.enable_hyperlane),
            ("squid", self.enable_squid),
            ("stargate", self.enable_stargate),
            ("across", self.enable_across),
        ]
        return [name for name, enabled in toggles if enabled]

    def rpc_urls(self) -> Dict[str, str]:
        return {
            "base": self.base_rpc_url,
            "arbitrum": self.arbitrum_rpc_url,
            "mantle": self.mantle_rpc_url,
            "ethereum": self.ethereum_rpc_url,
            "optimism": self.optimism_rpc_url,
        }

    def public_summary(self) -> Dict[str, Any]:
        """Non-secret view used by the health endpoint."""
        return {
            "providers": self.enabled_providers,
            "telegram": self.has_telegram_token,
            "webhook_secret": bool(self.telegram_webhook_secret),
        }


# Global settings instance
settings = Settings()
