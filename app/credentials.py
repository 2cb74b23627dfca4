# =============================================================================
# app/credentials.py - Shared Credentials
# =============================================================================
# All chapters read their secrets from one credentials file (dotenv format)
# kept next to its key file under config/.
#
# Usage:
#   credentials = Credentials(settings.CREDENTIALS_PATH, settings.MASTER_KEY_PATH)
#   credentials.get("STRIPE_API_KEY")
# =============================================================================

from functools import cached_property
from pathlib import Path

from dotenv import dotenv_values


class Credentials:
    """Read-only view over the credentials file and its key."""

    def __init__(self, content_path: Path, key_path: Path):
        self.content_path = Path(content_path)
        self.key_path = Path(key_path)

    @cached_property
    def config(self) -> dict[str, str]:
        if not self.content_path.is_file():
            return {}
        return {key: value for key, value in dotenv_values(self.content_path).items() if value is not None}

    @cached_property
    def key(self) -> str | None:
        if not self.key_path.is_file():
            return None
        return self.key_path.read_text(encoding="utf-8").strip() or None

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.config.get(name, default)

    def __getitem__(self, name: str) -> str:
        return self.config[name]

    def __contains__(self, name: str) -> bool:
        return name in self.config
