"""Configuration management for skillforge using Pydantic Settings."""

from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FateMode(StrEnum):
    """Who gets a fate (luck) stack by default."""

    EVERYONE = "everyone"
    PC_ONLY = "pconly"
    TRAIT_ONLY = "trait_only"
    NONE = "none"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="SKILLFORGE_",
        extra="ignore",
    )

    # Fate rules
    fate_mode: FateMode = Field(
        default=FateMode.EVERYONE, description="Fate availability: everyone, pconly, trait_only, none"
    )
    fate_default_base: int = Field(default=50, description="Fate base when no Fate trait exists")
    fate_requires_mystery: bool = Field(
        default=False, description="Disable fate unless a fate mystery applies to the skill"
    )

    # Combat rules
    outnumbered_step: int = Field(
        default=-10, description="Penalty per threatening opponent beyond the first"
    )

    # Mastery rules
    mastery_max_target: int | None = Field(
        default=None, description="Default cap on a boosted mastery base (None = uncapped)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@dataclass(frozen=True)
class RulesConfig:
    """Immutable rules configuration handed to every pipeline phase.

    Built once from :class:`Settings` at the edge of the program and carried in
    the derivation context, so nothing inside a pass reads ambient state.
    """

    fate_mode: FateMode = FateMode.EVERYONE
    fate_default_base: int = 50
    fate_requires_mystery: bool = False
    outnumbered_step: int = -10
    mastery_max_target: int | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RulesConfig":
        return cls(
            fate_mode=settings.fate_mode,
            fate_default_base=settings.fate_default_base,
            fate_requires_mystery=settings.fate_requires_mystery,
            outnumbered_step=settings.outnumbered_step,
            mastery_max_target=settings.mastery_max_target,
        )
