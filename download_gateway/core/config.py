"""Configuration management for the download gateway."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Basic settings
    environment: str = "development"
    log_level: str = "INFO"

    # Logging settings
    log_dir: str = "./logs"
    log_file_name: str = "download-gateway.log"

    # Rate limiting
    rate_limit_max: int = 10
    rate_limit_window_ms: int = 60_000
    rate_limit_db_path: str = "./data/rate-limits.json"
    rate_limit_save_debounce: float = 5.0  # seconds between disk writes
    rate_limit_cleanup_interval: float = 60.0  # seconds
    fallback_cleanup_interval: float = 300.0  # seconds

    # Extraction backend
    extraction_api_url: str = "http://localhost:3001"
    extraction_timeout: float = 35.0
    health_check_timeout: float = 5.0

    # Request limits
    max_body_size: int = 10 * 1024

    # Admin surface
    admin_api_key: Optional[str] = None

    # Runtime toggles
    enable_background_tasks: bool = True
    enable_metrics: bool = True

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def extraction_base_url(self) -> str:
        return self.extraction_api_url.rstrip("/")

    class Config:
        env_file = ".env"
        case_sensitive = False
