"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # Application
    app_name: str = "JobScout API"
    debug: bool = False
    log_level: str = "INFO"
    frontend_cors_origin: str = "http://localhost:3000"

    # Outbound HTTP (job board APIs)
    http_timeout: float = 30.0

    # Crawl throttling - seconds to wait between companies in a batch
    crawl_delay_api_seconds: float = 0.5
    crawl_delay_browser_seconds: float = 2.0

    # Browser lifecycle
    browser_restart_interval: int = 5
    browser_idle_timeout: float = 30.0

    # Crawl logs left "running" longer than this are treated as abandoned
    stale_crawl_minutes: int = 5

    # Match score recalculation page size
    score_recalc_batch_size: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()
