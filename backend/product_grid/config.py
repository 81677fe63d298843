import logging
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Product Grid"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:4321"]

    # Record store seeding
    seed_product_count: int = 50
    seed_random_seed: int = 1337

    # Query defaults
    default_page_size: int = 10
    max_page_size: int = 100

    # Field update rules
    min_price: Decimal = Decimal("0")
    max_price: Decimal = Decimal("999999.99")
    max_quantity: int = 999999
    simulated_failure_price: Decimal = Decimal("99.99")  # always answered with a 500

    # Client timings (seconds)
    debounce_delay: float = 0.3
    error_revert_delay: float = 1.0
    error_clear_delay: float = 1.0

    # Client transport
    api_base_url: str = "http://localhost:8030"
    request_timeout: float = 10.0

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_store: str = "INFO"            # record store + mutation service
    log_level_sync: str = "INFO"             # client cell transitions / controller

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Keep the page-size bounds consistent with each other."""
        if self.default_page_size > self.max_page_size:
            _config_logger.warning(
                "default_page_size=%d exceeds max_page_size=%d; clamping",
                self.default_page_size,
                self.max_page_size,
            )
            object.__setattr__(self, "default_page_size", self.max_page_size)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
