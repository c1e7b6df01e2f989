"""Centralized configuration for catalog-search using Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every field maps to ``CATALOG_SEARCH_<FIELD>`` (case-insensitive) and can
    also be set from a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Index storage
    index_root: Path = Field(default=Path("indexes"), description="Directory holding named search indexes")
    index_name: str = Field(default="scenes", min_length=1, description="Name of the scene index")
    writer_heap_size: int = Field(
        default=50_000_000,
        ge=15_000_000,
        description="Memory budget in bytes for the index writer",
    )

    # Indexing pipeline
    page_size: int = Field(default=100, ge=1, description="Scenes fetched per page during a full rebuild")
    progress_time_interval: float = Field(
        default=15.0,
        ge=0.0,
        description="Minimum seconds between progress log lines for incremental updates",
    )

    # Query engine
    search_limit: int = Field(default=25, ge=1, description="Maximum hits returned by a fuzzy search")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @property
    def index_path(self) -> Path:
        """Directory of the scene index itself."""
        return self.index_root / self.index_name
