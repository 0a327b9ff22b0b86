from pathlib import Path
from typing import Dict

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

SOLANA_CLUSTER_URLS: Dict[str, str] = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Solana RPC
    solana_rpc_url: str = Field(
        default="",
        description="Solana JSON-RPC endpoint; derived from the network when empty",
        validation_alias=AliasChoices(
            "solana_rpc_url",
            "SOLANA_RPC_URL",
            "NEXT_PUBLIC_SOLANA_RPC_URL",
            "NEXT_PUBLIC_RPC_ENDPOINT",
        ),
    )
    solana_network: str = Field(
        default="mainnet-beta",
        description="Solana cluster selector (mainnet, mainnet-beta, devnet)",
        validation_alias=AliasChoices("solana_network", "SOLANA_NETWORK", "NEXT_PUBLIC_SOLANA_NETWORK"),
    )
    solana_rpc_timeout_seconds: int = Field(default=15, description="Timeout for a single RPC call")

    # Market data API keys
    coingecko_api_key: str = Field(default="", description="Coingecko API key (optional)")
    coinmarketcap_api_key: str = Field(
        default="",
        description="CoinMarketCap API key used by the market trends route",
        validation_alias=AliasChoices("coinmarketcap_api_key", "COINMARKETCAP_API_KEY", "CMC_API_KEY"),
    )

    # LLM Provider Settings
    llm_provider: str = Field(default="anthropic", description="Default LLM provider")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="Default LLM model")
    max_tokens: int = Field(default=1024, description="Maximum tokens for LLM response")
    temperature: float = Field(default=0.7, description="LLM temperature setting")

    # Timeouts
    request_timeout_seconds: int = Field(default=30, ge=1, description="Overall request timeout")

    # Cache Settings
    wallet_cache_ttl_seconds: int = Field(default=30, ge=0, description="Wallet balance cache lifetime")
    price_cache_ttl_seconds: int = Field(default=60, ge=0, description="Token price cache lifetime")
    market_trends_cache_seconds: int = Field(default=120, ge=0, description="Market trends revalidation window")
    max_cache_size: int = Field(default=1000, description="Maximum entries in the shared TTL cache")

    # Session / context
    session_max_history: int = Field(default=10, ge=1, description="Messages kept per session")
    max_preferred_tokens: int = Field(default=5, ge=1, description="Preferred tokens kept per profile")
    context_recent_messages: int = Field(default=5, ge=1, description="Messages forwarded to the LLM")
    context_transaction_limit: int = Field(default=5, ge=0, description="Transactions summarised in the prompt")
    chat_transaction_limit: int = Field(default=10, ge=0, description="Transactions refreshed per chat request")

    # Wallet overview retry
    wallet_fetch_max_attempts: int = Field(default=3, ge=1, description="Attempts for the wallet overview fetch")
    wallet_fetch_initial_delay_seconds: float = Field(default=2.0, ge=0, description="First retry delay")
    wallet_fetch_max_delay_seconds: float = Field(default=10.0, ge=0, description="Retry delay ceiling")

    @property
    def normalized_network(self) -> str:
        network = (self.solana_network or "").strip().lower()
        if network in {"", "mainnet", "mainnet-beta"}:
            return "mainnet-beta"
        return network

    @property
    def resolved_solana_rpc_url(self) -> str:
        if self.solana_rpc_url:
            return self.solana_rpc_url
        return SOLANA_CLUSTER_URLS.get(self.normalized_network, SOLANA_CLUSTER_URLS["mainnet-beta"])

    @property
    def has_coingecko_key(self) -> bool:
        return bool(self.coingecko_api_key)

    @property
    def has_coinmarketcap_key(self) -> bool:
        return bool(self.coinmarketcap_api_key)

    @property
    def has_anthropic_key(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_llm_key(self) -> bool:
        """Check if we have an API key for the configured LLM provider"""
        if self.llm_provider.lower() in ["anthropic", "claude"]:
            return self.has_anthropic_key
        return False

    def explorer_url(self, address: str) -> str:
        return f"https://explorer.solana.com/address/{address}?cluster={self.normalized_network}"


# Global settings instance
settings = Settings()
