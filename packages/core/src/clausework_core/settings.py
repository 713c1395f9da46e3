from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLAUSEWORK_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    max_thread_depth: int = 64
    # Wall-clock budget per document render, in seconds. None disables the check.
    budget_seconds: float | None = None
    child_links: bool = False
    numbering: str = "outline"
    log_level: str = "WARNING"


settings = Settings()
