# WORKFLOW: Core configuration management for the Tariff Scraper API.
# Used by: All modules throughout the application
# Configuration includes:
# - API settings (prefix, CORS, host/port)
# - Search provider settings (Google Custom Search key, engine id, freshness)
# - Fetch settings (timeouts, referrer, worker pool size, politeness delay)
# - Logging configuration
#
# Loaded at startup and used by all services for consistent configuration.

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Tariff Scraper API"
    version: str = "1.0.0"

    # Environment
    environment: str = "development"
    debug: bool = True

    # Logging
    log_level: str = "INFO"

    # CORS
    allowed_origins: list[str] = ["http://localhost:3000"]
    allowed_methods: list[str] = ["*"]
    allowed_headers: list[str] = ["*"]

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8001

    # Search (Google Custom Search JSON API)
    google_search_api_key: str = ""
    google_search_engine_id: str = ""
    google_search_url: str = "https://www.googleapis.com/customsearch/v1"
    google_search_date_restrict: str = "y1"
    search_timeout_seconds: float = 30.0

    # Fetching
    fetch_timeout_seconds: float = 15.0
    fetch_referrer: str = "https://www.google.com/"
    scrape_max_concurrency: int = 5
    fetch_delay_seconds: float = 0.0

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def search_configured(self) -> bool:
        return bool(self.google_search_api_key and self.google_search_engine_id)


settings = Settings()
