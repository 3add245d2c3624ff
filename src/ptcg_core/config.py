"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (prefix ``PTCG_``)."""

    model_config = SettingsConfigDict(
        env_prefix="PTCG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Deck rules
    deck_size: int = Field(
        default=60,
        ge=1,
        description="Required number of cards in a legal deck",
    )
    hand_size: int = Field(
        default=7,
        ge=1,
        description="Opening hand size",
    )
    prize_count: int = Field(
        default=6,
        ge=1,
        description="Number of prize cards set aside at game start",
    )
    max_copies: int = Field(
        default=4,
        ge=1,
        description="Maximum copies of a card by name (basic Energy excluded)",
    )

    # Cards-seen heuristics (approximation, not a game simulation)
    cards_seen_turn_one: int = Field(
        default=7,
        description="Cards seen by the end of turn 1",
    )
    cards_seen_turn_two: int = Field(
        default=15,
        description="Cards seen by turn 2 (draws plus typical search and draw support)",
    )
    cards_seen_turn_three: int = Field(
        default=20,
        description="Cards seen by turn 3",
    )
    dead_draw_cards_seen: int = Field(
        default=8,
        description="Cards seen when checking for a Supporter on the first turn",
    )

    # Reference data
    meta_snapshot_path: Path | None = Field(
        default=None,
        description="Override for the bundled meta snapshot JSON file",
    )
    emergency_result_version: str = Field(
        default="1.0",
        description="Version tag stamped on emergency fallback results",
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get engine settings (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
