from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Chain RPC (balances + ERC20 reads)
    rpc_url: str = "https://rpc.pulsechain.com"
    rpc_max_rps: float = 100.0

    # Block explorer holder listing (Blockscout v2)
    scan_api_url: str = "https://api.scan.pulsechain.com/api/v2"
    scan_max_rps: float = 5.0

    # DexScreener pair listing
    dexscreener_api_url: str = "https://api.dexscreener.com/latest/dex/tokens"
    dexscreener_max_rps: float = 4.0

    # Burn addresses (comma-separated, checksummed or not)
    burn_addresses: str = (
        "0x0000000000000000000000000000000000000000,"
        "0x000000000000000000000000000000000000dEaD"
    )

    # Native asset identity (no contract to read it from)
    native_token_name: str = "PulseChain"
    native_token_symbol: str = "PLS"
    native_token_decimals: int = 18

    # Fetch policy: constant backoff between attempts
    query_timeout_sec: float = 30.0
    retry_attempts: int = 3
    retry_delay_sec: float = 1.0

    # Holder pagination
    holders_target: int = 200
    holders_page_delay_sec: float = 1.0  # upstream rate limit between pages

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False
    log_dir: str = "logs"  # empty disables the file sink

    # Dashboard API
    dashboard_host: str = "0.0.0.0"
    dashboard_port: int = 8080
    dashboard_debug: bool = False
    dashboard_rate_limit: str = "30/minute"
    dashboard_scan_deadline_sec: float = 120.0  # 0 disables

    @field_validator("retry_attempts", "holders_target")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @field_validator(
        "query_timeout_sec", "retry_delay_sec", "holders_page_delay_sec",
        "rpc_max_rps", "scan_max_rps", "dexscreener_max_rps", "dashboard_scan_deadline_sec",
    )
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @field_validator("burn_addresses")
    @classmethod
    def _has_burn_address(cls, value: str) -> str:
        if not any(part.strip() for part in value.split(",")):
            raise ValueError("at least one burn address must be configured")
        return value

    @property
    def burn_address_list(self) -> list[str]:
        return [part.strip() for part in self.burn_addresses.split(",") if part.strip()]


settings = Settings()
