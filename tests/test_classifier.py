"""Tests for card classification."""

from __future__ import annotations

import pytest
from factories import energy, pokemon, trainer

from ptcg_core.classifier import classify, classify_cards, energy_provides, is_basic_energy
from ptcg_core.data.models.card import CardFace
from ptcg_core.exceptions import ClassificationError


class TestPokemonClassification:
    """Tests for Pokemon roles and ratings."""

    def test_big_hitter_is_main_attacker(self) -> None:
        card = pokemon("Zapdos ex", hp=220, subtypes=("Basic", "ex"), attacks=((3, 210),))
        result = classify(card)
        assert result.category == "pokemon"
        assert result.role == "main_attacker"
        assert result.prize_value == 2

    def test_single_prize_120_is_main_attacker(self) -> None:
        """A single-prize Pokemon hitting 120 is a main attacker."""
        assert classify(pokemon("Raichu", attacks=((2, 120),))).role == "main_attacker"

    def test_draw_ability_is_support(self) -> None:
        card = pokemon(
            "Bibarel",
            hp=120,
            subtypes=("Stage 1",),
            evolves_from="Bidoof",
            attacks=((3, 60),),
            ability="Once during your turn, you may draw cards until you have 5 cards in your hand.",
        )
        result = classify(card)
        assert result.role == "ability_support"
        assert "draw_engine" in result.synergy_tags

    def test_small_basic_is_starter(self) -> None:
        assert classify(pokemon("Pichu", hp=40, attacks=((1, 10),))).role == "starter"

    def test_setup_speed_by_stage_and_cost(self) -> None:
        assert classify(pokemon("Pikachu", attacks=((1, 30),))).setup_speed == "immediate"
        assert classify(pokemon("Electabuzz", attacks=((2, 60),))).setup_speed == "fast"
        assert classify(pokemon("Zapdos", attacks=((3, 120),))).setup_speed == "moderate"
        stage2 = pokemon("Electivire", subtypes=("Stage 2",), evolves_from="Electabuzz", attacks=((1, 60),))
        assert classify(stage2).setup_speed == "slow"

    def test_power_level_in_range(self) -> None:
        for card in (
            pokemon("Pichu", hp=40, attacks=((1, 10),)),
            pokemon("Arceus VSTAR", hp=280, subtypes=("VSTAR",), attacks=((3, 230),), ability="Draw"),
        ):
            result = classify(card)
            assert 1 <= result.power_level <= 10
            assert 1 <= result.quality <= 10

    def test_prize_value_by_name(self) -> None:
        """Prize value falls back to the name when subtypes are missing."""
        assert pokemon("Lugia VSTAR", subtypes=()).prize_value == 3
        assert pokemon("Miraidon ex", subtypes=()).prize_value == 2
        assert pokemon("Pikachu").prize_value == 1


class TestTrainerClassification:
    """Tests for Trainer categories."""

    def test_curated_tables(self) -> None:
        cases = {
            "Professor's Research": "draw",
            "Quick Ball": "search",
            "Elesa's Sparkle": "energy_acceleration",
            "Boss's Orders": "disruption",
            "Path to the Peak": "stadium",
        }
        for name, category in cases.items():
            assert classify(trainer(name)).trainer_category == category, name

    def test_name_keywords(self) -> None:
        """Unknown names fall back to keyword groups."""
        assert classify(trainer("Switch Cart")).trainer_category == "switching"
        assert classify(trainer("Night Stretcher")).trainer_category == "recovery"
        assert classify(trainer("Prime Catcher Deluxe")).trainer_category == "disruption"

    def test_text_scan(self) -> None:
        """With no name match the rules text decides."""
        card = trainer("Mystery Supporter", "Supporter", rules=("Draw 3 cards.",))
        result = classify(card)
        assert result.trainer_category == "draw"
        assert result.trainer_type == "supporter"

    def test_fallback_by_trainer_type(self) -> None:
        assert classify(trainer("Bravery Charm", "Pokémon Tool")).trainer_category == "tool"
        assert classify(trainer("Town Square", "Stadium")).trainer_category == "stadium"
        assert classify(trainer("Odd Item")).trainer_category == "utility"

    def test_tech_detection(self) -> None:
        assert classify(trainer("Lost City", "Stadium")).is_tech


class TestEnergyClassification:
    """Tests for Energy cards."""

    def test_basic_energy(self) -> None:
        result = classify(energy("Lightning Energy"))
        assert result.energy_kind == "basic"
        assert result.provides == ["Lightning"]
        assert result.quality == 7

    def test_basic_energy_by_name(self) -> None:
        """Basic Energy is recognised by name even without the Basic subtype."""
        card = CardFace(id="w", name="Basic Water Energy", supertype="Energy")
        assert is_basic_energy(card)

    def test_twin_energy_provides_two_colorless(self) -> None:
        card = energy("Twin Energy", basic=False)
        assert classify(card).energy_kind == "special"
        assert energy_provides(card) == ["Colorless", "Colorless"]


class TestClassifyCards:
    """Tests for batch classification and degradation."""

    def test_unknown_supertype_raises(self) -> None:
        card = CardFace(id="odd", name="Odd Card", supertype="Mystery")
        with pytest.raises(ClassificationError) as excinfo:
            classify(card)
        assert excinfo.value.card_id == "odd"

    def test_batch_degrades_bad_cards(self) -> None:
        good = pokemon("Pikachu")
        bad = CardFace(id="odd", name="Odd Card", supertype="Mystery")
        results = classify_cards([good, bad])
        assert set(results) == {"pikachu", "odd"}
        assert results["odd"].degraded
        assert results["odd"].category == "unknown"
        assert not results["pikachu"].degraded

    def test_classification_is_pure(self) -> None:
        """Equal cards classify identically."""
        assert classify(pokemon("Pikachu")) == classify(pokemon("Pikachu"))
