"""Configuration management for crossref-client.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .api.errors import ConfigurationError

# Load .env file if present
load_dotenv()


def _env_number(name: str, default: str, convert):
    value = os.environ.get(name, default)
    try:
        return convert(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


@dataclass
class Config:
    """Application configuration."""

    # Request
    user_agent: Optional[str]
    api_version: Optional[str]
    timeout: float  # seconds

    # Cache
    cache_dir: Optional[Path]
    cache_ttl: int  # seconds

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        cache_dir_str = os.environ.get("CROSSREF_CACHE_DIR")

        return cls(
            user_agent=os.environ.get("CROSSREF_USER_AGENT") or None,
            api_version=os.environ.get("CROSSREF_API_VERSION") or None,
            timeout=_env_number("CROSSREF_TIMEOUT", "10", float),
            cache_dir=Path(cache_dir_str).expanduser() if cache_dir_str else None,
            cache_ttl=_env_number("CROSSREF_CACHE_TTL", "1200", int),
            log_level=os.environ.get("CROSSREF_LOG_LEVEL", "WARNING").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.cache_ttl < 0:
            errors.append(f"CROSSREF_CACHE_TTL must not be negative: {self.cache_ttl}")

        if self.timeout <= 0:
            errors.append(f"CROSSREF_TIMEOUT must be positive: {self.timeout}")

        if self.api_version is not None and "/" in self.api_version:
            errors.append(f"CROSSREF_API_VERSION must be a single path segment: {self.api_version}")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown CROSSREF_LOG_LEVEL: {self.log_level}")

        # Check cache directory can be created
        if self.cache_dir is not None and not self.cache_dir.exists():
            try:
                self.cache_dir.mkdir(parents=True, exist_ok=True)
            except OSError:
                errors.append(f"Cannot create cache directory: {self.cache_dir}")

        return errors

    def has_cache(self) -> bool:
        """Check if a persistent cache is configured."""
        return self.cache_dir is not None


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
