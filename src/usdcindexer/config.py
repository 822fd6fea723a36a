from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    lookback_hours: int = 24
    page_size: int = 1000  # getSignaturesForAddress maximum
    page_delay_seconds: float = 0.1
    service_interval_seconds: float = 3600.0
    output_path: str = "usdc_transfers.json"
    rpc_rate_per_second: float = 5.0
    http_timeout: float = 30.0
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
