"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SIMPLETASKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Vault settings
    vault_path: Path | None = None
    include_patterns: list[str] = ["**/*.md"]
    exclude_patterns: list[str] = [".obsidian/*", ".trash/*", ".git/*", "node_modules/*"]

    # Data storage (settings.json lives here)
    data_path: Path = Path("data")

    # Scanning
    scan_workers: int = 8  # concurrent document reads per scan
    rescan_delay: float = 1.0  # seconds of quiet before a debounced rescan


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
