from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Helius RPC: comma-separated keys, one endpoint per key (round-robin)
    helius_api_keys: str = ""
    helius_network: str = "devnet"  # "devnet" | "mainnet"

    # Fallback endpoint when no Helius key is configured
    solana_rpc_url: str = "https://api.devnet.solana.com"

    # Launchpad program (bonding curves + trade events)
    launchpad_program_id: str = "GzXpRdSJRrd9qqbigtawUFAqjf39inX5Zju7sZDSpdJx"
    graduation_threshold_lamports: int = 85_000_000_000  # 85 SOL

    # RPC transport
    rpc_max_rps: float = 10.0  # per endpoint
    rpc_timeout_sec: float = 15.0
    rpc_max_retries: int = 0  # 429 and transport errors

    # Signature pagination / transaction batching
    signature_page_size: int = 100
    profile_max_pages: int = 5  # per bonding-curve PDA
    tx_batch_size: int = 10

    # Token board enrichment (sequential, throttled)
    enrich_warmup_sec: float = 2.0
    enrich_item_delay_sec: float = 0.4
    enrich_trades_per_token: int = 10
    token_refresh_interval_sec: float = 300.0  # 0 = refresh only at startup

    # Dashboard API
    dashboard_port: int = 8080
    dashboard_debug: bool = False
    profile_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    @property
    def helius_key_list(self) -> list[str]:
        return [k.strip() for k in self.helius_api_keys.split(",") if k.strip()]

    @property
    def rpc_endpoints(self) -> list[str]:
        """One Helius URL per configured key (empty if no keys)."""
        return [
            f"https://{self.helius_network}.helius-rpc.com/?api-key={key}"
            for key in self.helius_key_list
        ]


settings = Settings()
