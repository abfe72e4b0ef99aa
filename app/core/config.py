from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


CACHE_POLICIES = {"none", "ttl", "lru"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR,
    DB_FILENAME, DEFAULT_CURRENCY, CURRENCY_CACHE_POLICY, FETCH_TIMEOUT_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Basic app metadata
    app_name: str = "Trip Budget Planner"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "app.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Currency resolution
    default_currency: str = "USD"
    # Allowed: 'none' (process lifetime), 'ttl', 'lru'
    currency_cache_policy: str = "none"
    currency_cache_ttl_seconds: int = 3600
    currency_cache_max_entries: int = 1024

    # Cost source fan-out; a branch exceeding this is treated as failed
    fetch_timeout_seconds: float = 5.0

    # Shared read-only links
    share_token_bytes: int = 16

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.default_currency = self.default_currency.strip().upper()
        if self.currency_cache_policy not in CACHE_POLICIES:
            raise ValueError(
                f"Unsupported currency_cache_policy '{self.currency_cache_policy}'. Allowed: {CACHE_POLICIES}"
            )
        if self.fetch_timeout_seconds <= 0:
            raise ValueError("fetch_timeout_seconds must be positive")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
