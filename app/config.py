# =============================================================================
# app/config.py - Harness Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.DATABASE_PATH)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# 3. settings.env files found on the config paths (see overlay_settings)
# =============================================================================

from functools import lru_cache
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Repository root - equivalent of the application root directory
ROOT_DIR = Path(__file__).resolve().parent.parent

DEFAULT_DATABASE_PATH = ROOT_DIR / "book.sqlite3"
DEFAULT_CONFIG_DIR = ROOT_DIR / "config"


class Settings(BaseSettings):
    """
    Harness settings loaded from environment variables.

    Defaults describe the local development harness: a SQLite file next to
    the repository, jobs executed on a throwaway thread, broadcasts printed to
    stdout and every exception shown in full.
    """

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    LOG: bool = Field(
        default=False,
        description=(
            "LOG=1 sends database and application logs to stdout. "
            "Also accepts true/yes/on; 0/false/no/off or unset discards them"
        )
    )

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------

    DATABASE_PATH: Path = Field(
        default=DEFAULT_DATABASE_PATH,
        description="SQLite database file shared by every chapter"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY_BASE: str = Field(
        default="i_am_a_secret",
        description="Secret used to sign blob URLs"
    )

    CREDENTIALS_PATH: Path = Field(
        default=DEFAULT_CONFIG_DIR / "credentials.env",
        description="Single credentials file shared by all chapters"
    )

    MASTER_KEY_PATH: Path = Field(
        default=DEFAULT_CONFIG_DIR / "master.key",
        description="Key file that accompanies the credentials file"
    )

    # -------------------------------------------------------------------------
    # Attachment Storage
    # -------------------------------------------------------------------------

    STORAGE_SERVICE: str = Field(
        default="local",
        description="Name of the storage service configuration to use"
    )

    STORAGE_ROOT: Path = Field(
        default=Path("./storage"),
        description="Root directory of the local Disk service"
    )

    # -------------------------------------------------------------------------
    # Jobs & Broadcasting
    # -------------------------------------------------------------------------

    JOB_QUEUE_ADAPTER: str = Field(
        default="async_inline",
        description="Queue adapter used to execute background jobs"
    )

    CABLE_ADAPTER: str = Field(
        default="test_print",
        description="Subscription adapter used for channel broadcasts"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    EAGER_LOAD: bool = Field(
        default=False,
        description="Import autoload paths eagerly at boot"
    )

    CONSIDER_ALL_REQUESTS_LOCAL: bool = Field(
        default=True,
        description="Show full exception details instead of a generic error page"
    )

    # Empty means every host is accepted
    ALLOWED_HOSTS: str = Field(
        default="",
        description="Allowed request hosts (comma-separated)"
    )

    DEFAULT_URL_HOST: str = Field(
        default="localhost:3000",
        description="Host used when building absolute URLs outside a request"
    )

    APP_MODULE: str | None = Field(
        default=None,
        description="Module holding the chapter domain code, imported after boot"
    )

    API_HOST: str = Field(
        default="127.0.0.1",
        description="Host to bind the server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the server"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def allowed_hosts_list(self) -> list[str]:
        """
        Parse ALLOWED_HOSTS string into a list.

        Example: "example.com, .test" -> ["example.com", ".test"]
        """
        return [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()]

    @property
    def storage_configurations(self) -> dict[str, dict]:
        """Named storage service configurations."""
        return {
            "local": {"service": "Disk", "root": self.STORAGE_ROOT},
        }


def overlay_settings(settings: Settings, env_files: Iterable[Path]) -> Settings:
    """
    Apply dotenv files on top of existing settings.

    Files are applied in order, so later files win. Keys that are not
    settings fields are ignored, as are files that don't exist.

    Args:
        settings: Base settings
        env_files: dotenv files, lowest precedence first

    Returns:
        Settings: A new settings instance (the base one is left untouched)
    """
    overrides: dict[str, str] = {}
    for env_file in env_files:
        if not Path(env_file).is_file():
            continue
        for key, value in dotenv_values(env_file).items():
            if key in Settings.model_fields and value not in (None, ""):
                overrides[key] = value

    if not overrides:
        return settings

    return Settings(**{**settings.model_dump(), **overrides})


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Returns:
        Settings: The harness settings built from the environment
    """
    return Settings()
