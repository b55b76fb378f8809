"""Configuration for the Rug Monitor pipeline."""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv
from solders.pubkey import Pubkey

load_dotenv()


# Raydium AMM v4 fee account - every pool creation mentions it
RAYDIUM_FEE_ACCOUNT = "7YttLkHDoNj9wyDur5pM1ejNaAvT9X4eqaYcHQqtj2G5"

# Raydium AMM v4 authority - owns both vault legs of a new pool
RAYDIUM_POOL_AUTHORITY = "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"

# Wrapped SOL
SOL_MINT = "So11111111111111111111111111111111111111112"


@dataclass
class MonitorConfig:
    """Configuration for the new-pool monitor."""

    # RPC Configuration
    rpc_http_url: str = field(
        default_factory=lambda: os.getenv(
            "SOLANA_RPC_URL",
            "https://api.mainnet-beta.solana.com"
        )
    )
    rpc_ws_url: str = field(
        default_factory=lambda: os.getenv(
            "SOLANA_WS_URL",
            "wss://api.mainnet-beta.solana.com"
        )
    )
    helius_api_key: str = field(
        default_factory=lambda: os.getenv("HELIUS_API_KEY", "")
    )
    rpc_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("RPC_TIMEOUT_SECONDS", "30"))
    )

    # Trusted on-chain identities
    filter_key: str = field(
        default_factory=lambda: os.getenv("RAYDIUM_FEE_ACCOUNT", RAYDIUM_FEE_ACCOUNT)
    )
    pool_authority: str = field(
        default_factory=lambda: os.getenv("RAYDIUM_POOL_AUTHORITY", RAYDIUM_POOL_AUTHORITY)
    )
    reference_mint: str = field(
        default_factory=lambda: os.getenv("REFERENCE_MINT", SOL_MINT)
    )
    commitment: str = "confirmed"

    # RugCheck
    rugcheck_base_url: str = field(
        default_factory=lambda: os.getenv("RUGCHECK_BASE_URL", "https://api.rugcheck.xyz/v1")
    )
    rugcheck_throttle_ms: int = field(
        default_factory=lambda: int(os.getenv("RUGCHECK_THROTTLE_MS", "2000"))
    )
    rugcheck_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("RUGCHECK_TIMEOUT_SECONDS", "10"))
    )

    # Persistence
    data_path: str = field(
        default_factory=lambda: os.getenv(
            "DATA_PATH",
            os.path.join("data", "new_solana_tokens.json")
        )
    )
    error_log_path: str = field(
        default_factory=lambda: os.getenv("ERROR_LOG_PATH", "errorNewTokensLogs.txt")
    )

    # Transaction fetch retries (1 = single attempt)
    fetch_max_tries: int = field(
        default_factory=lambda: int(os.getenv("FETCH_MAX_TRIES", "1"))
    )

    # Reconnection settings
    reconnect_max_time_seconds: float = 300.0
    reconnect_backoff_factor: float = 1.0
    ping_interval_seconds: float = 30.0
    ping_timeout_seconds: float = 10.0

    @property
    def helius_rpc_url(self) -> str:
        """Get Helius RPC URL if API key is configured."""
        if self.helius_api_key:
            return f"https://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"
        return self.rpc_http_url

    @property
    def helius_ws_url(self) -> str:
        """Get Helius WebSocket URL if API key is configured."""
        if self.helius_api_key:
            return f"wss://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"
        return self.rpc_ws_url

    @property
    def throttle_seconds(self) -> float:
        return self.rugcheck_throttle_ms / 1000.0

    def validate(self) -> None:
        """
        Check addresses and numeric settings.

        Raises:
            ValueError: If an address is not a valid public key or a
                numeric setting is out of range
        """
        for name in ("filter_key", "pool_authority", "reference_mint"):
            value = getattr(self, name)
            try:
                Pubkey.from_string(value)
            except Exception as e:
                raise ValueError(f"{name} is not a valid public key: {value!r}") from e

        if self.rugcheck_throttle_ms < 0:
            raise ValueError("rugcheck_throttle_ms must be >= 0")
        if self.fetch_max_tries < 1:
            raise ValueError("fetch_max_tries must be >= 1")
        if self.rpc_timeout_seconds <= 0 or self.rugcheck_timeout_seconds <= 0:
            raise ValueError("timeouts must be positive")


# Default configuration
DEFAULT_CONFIG = MonitorConfig()
