"""Library configuration via environment variables and runtime overrides."""

from functools import lru_cache
from typing import Any, Optional

from pydantic_settings import BaseSettings

from expectant.errors import InvalidConfiguration

COLLISION_POLICIES = ("error", "force")


class Settings(BaseSettings):
    """Process-wide defaults, loaded from EXPECTANT_* environment variables."""

    # Rule definer naming: [prefix_]field_definer[_suffix]
    RULE_PREFIX: Optional[str] = None
    RULE_SUFFIX: Optional[str] = "rule"

    # What to do when a generated entry point name is already taken
    COLLISION_POLICY: str = "error"

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    model_config = {
        "env_prefix": "EXPECTANT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure(**overrides: Any) -> Settings:
    """Override settings for the rest of the process.

    Keys are case-insensitive: ``configure(rule_prefix="validate",
    rule_suffix=None)``.

    Raises:
        InvalidConfiguration: If a key is not a known setting.
    """
    settings = get_settings()
    for key, value in overrides.items():
        attr = key.upper()
        if attr not in Settings.model_fields:
            raise InvalidConfiguration(f"Unknown setting: {key}")
        setattr(settings, attr, value)
    return settings


def reset_configuration() -> None:
    """Drop runtime overrides; the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
