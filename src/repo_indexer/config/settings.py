"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # General
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 1

    # --- Durable store ---
    sqlite_path: str = "~/.repo-indexer/repositories.db"

    # --- Search index ---
    search_index_path: str = "~/.repo-indexer/search.db"

    # --- GitHub ---
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    github_token: str | None = None
    github_timeout: float = 20.0
    github_concurrency: int = 8
    max_file_size: int = 1_000_000

    # --- Pipeline ---
    metadata_timeout: float = 30.0
    status_write_timeout: float = 15.0
    fetch_heartbeat_delay: float = 2.0
    progress_update_every: int = 2
    job_workers: int = 2
    popular_star_threshold: int = 1000
    cache_ttl_hours: int = 24

    # --- Insights (Ollama) ---
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    summarizer_timeout: float = 120.0
    insights_max_files: int = 300
    insights_max_readme_chars: int = 12_000

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        # Resolve sqlite paths
        self.sqlite_path = str(Path(self.sqlite_path).expanduser())
        self.search_index_path = str(Path(self.search_index_path).expanduser())

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
