"""Tests for engine settings."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from factories import no_draw_deck

from ptcg_core.analyzer import analyze
from ptcg_core.config import Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    """Tests for Settings and the cached accessor."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.deck_size == 60
        assert settings.hand_size == 7
        assert settings.prize_count == 6
        assert settings.max_copies == 4
        assert settings.meta_snapshot_path is None

    def test_singleton(self) -> None:
        assert get_settings() is get_settings()

    def test_reset_rereads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert get_settings().log_level == "INFO"
        monkeypatch.setenv("PTCG_LOG_LEVEL", "DEBUG")
        assert get_settings().log_level == "INFO"
        reset_settings()
        assert get_settings().log_level == "DEBUG"

    def test_invalid_value_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PTCG_DECK_SIZE", "0")
        with pytest.raises(ValueError):
            Settings()

    def test_deck_size_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A smaller configured deck size makes a 60-card list too long."""
        monkeypatch.setenv("PTCG_DECK_SIZE", "58")
        result = analyze(no_draw_deck())
        assert not result.is_legal
        assert result.legality.issues[0].suggestion == "Remove 2 cards"
