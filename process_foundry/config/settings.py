"""
Configuration settings for the process foundry.
"""

import os
from typing import Optional

from dotenv import load_dotenv

from process_foundry.exceptions import ConfigurationError

# Load environment variables from .env file
_ = load_dotenv()


class Settings:
    """Foundry settings loaded from environment variables."""

    def __init__(self):
        self.log_level: str = self._get_env("FOUNDRY_LOG_LEVEL", "INFO").upper()
        self.shell: Optional[str] = os.getenv("FOUNDRY_SHELL") or os.getenv("SHELL")
        self.command_timeout: Optional[float] = self._get_timeout(
            "FOUNDRY_COMMAND_TIMEOUT", 60.0
        )
        self.sudo_command: str = self._get_env("FOUNDRY_SUDO", "sudo")

    def _get_env(self, key: str, default: str) -> str:
        """Get an environment variable with a default value."""
        return os.getenv(key, default)

    def _get_timeout(self, key: str, default: float) -> Optional[float]:
        """Seconds as a float; 0 or a negative value disables the timeout."""
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError:
            raise ConfigurationError(
                f"Environment variable {key} must be a number of seconds, got '{raw}'"
            )
        return value if value > 0 else None


# Global settings instance
settings = Settings()
