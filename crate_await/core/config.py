from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Registry
    registry_url: str = "https://crates.io"

    # Availability polling (seconds)
    await_timeout: float = 60.0
    metadata_poll_interval: float = 5.0
    download_poll_interval: float = 1.0

    # HTTP client
    http_timeout: float = 10.0
    http_verify_ssl: bool = True  # set False behind corporate SSL-inspection proxies
    user_agent: str = "publish-crates"

    # Logging
    log_level: str = "INFO"


settings = Settings()
