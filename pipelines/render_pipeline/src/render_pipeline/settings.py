"""
Configuration settings for the render pipeline.

Environment variables:
    CLAUSEWORK_MAX_THREAD_DEPTH   Deepest comment reply nesting before a render fails
    CLAUSEWORK_BUDGET_SECONDS     Wall-clock budget per document (unset: none)
    CLAUSEWORK_CHILD_LINKS        Emit permalinks to child forms by digest
    CLAUSEWORK_NUMBERING          Default numbering scheme for printed output
    CLAUSEWORK_LOG_LEVEL          Logging level for the CLI
    CLAUSEWORK_OUTPUT_DIR         Where `build` writes rendered pages
"""

from pathlib import Path

from pydantic_settings import SettingsConfigDict

from clausework_core.settings import Settings as CoreSettings


class Settings(CoreSettings):
    """Render pipeline settings."""

    model_config = SettingsConfigDict(
        env_prefix="CLAUSEWORK_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    output_dir: Path = Path("site")


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
