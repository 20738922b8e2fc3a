"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    snapshot_path: Path = Path("data/snapshot.yaml")
    journal: bool = False
    layout_seed: int | None = None
    debug: bool = False
    app_title: str = "PageGraph"

    model_config = SettingsConfigDict(
        env_prefix="PAGEGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
