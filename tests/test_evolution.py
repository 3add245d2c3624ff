"""Tests for evolution-line reconstruction."""

from __future__ import annotations

from factories import charizard_deck, energy, make_deck, missing_basic_deck, pokemon, trainer

from ptcg_core.evolution import MISSING_SUFFIX, analyze_evolution


class TestEvolutionLines:
    """Tests for analyze_evolution."""

    def test_missing_basic_is_tagged(self) -> None:
        """Stage 1 cards whose Basic is absent form a zero-completeness line."""
        analysis = analyze_evolution(missing_basic_deck())
        assert len(analysis.lines) == 1
        line = analysis.lines[0]
        assert line.base_pokemon == f"Pikachu{MISSING_SUFFIX}"
        assert line.base_pokemon.endswith("(MISSING)")
        assert line.completeness == 0
        assert line.basic_count == 0
        assert line.stage1 == ["Raichu"]
        assert line.stage1_count == 4
        assert line.bottleneck == "basic"
        assert "Add Pikachu or remove its evolutions" in analysis.recommendations

    def test_full_stage2_line(self) -> None:
        analysis = analyze_evolution(charizard_deck())
        by_base = {line.base_pokemon: line for line in analysis.lines}
        assert set(by_base) == {"Charmander", "Pidgey"}

        charmander = by_base["Charmander"]
        assert charmander.structure == "4-1-3"
        assert charmander.stage1 == ["Charmeleon"]
        assert charmander.stage2 == ["Charizard ex"]
        assert charmander.completeness == 100.0
        assert analysis.has_rare_candy

    def test_rare_candy_improves_stage2_odds(self) -> None:
        """Rare Candy gives a Stage 2 line a second route to the board."""
        line_cards = [
            (pokemon("Ralts", hp=70), 4),
            (pokemon("Kirlia", subtypes=("Stage 1",), evolves_from="Ralts"), 1),
            (pokemon("Gardevoir ex", subtypes=("Stage 2", "ex"), evolves_from="Kirlia"), 3),
            (energy("Psychic Energy"), 10),
        ]
        without = analyze_evolution(make_deck(*line_cards, (trainer("Odd Item"), 4))).lines[0]
        with_candy = analyze_evolution(make_deck(*line_cards, (trainer("Rare Candy"), 4))).lines[0]
        assert with_candy.turn_three_stage2 >= without.turn_three_stage2

    def test_rare_candy_does_not_replace_stage1(self) -> None:
        """A Stage 2 whose Stage 1 is absent is a missing line even with Rare Candy."""
        deck = make_deck(
            (pokemon("Ralts", hp=70), 4),
            (pokemon("Gardevoir ex", subtypes=("Stage 2", "ex"), evolves_from="Kirlia"), 3),
            (trainer("Rare Candy"), 4),
        )
        analysis = analyze_evolution(deck)
        assert [line.base_pokemon for line in analysis.lines] == [f"Kirlia{MISSING_SUFFIX}"]
        line = analysis.lines[0]
        assert line.stage2 == ["Gardevoir ex"]
        assert line.completeness == 0
        assert "Add Kirlia or remove its evolutions" in analysis.recommendations

    def test_stage1_heavier_than_basic(self) -> None:
        deck = make_deck(
            (pokemon("Bidoof", hp=60), 2),
            (pokemon("Bibarel", subtypes=("Stage 1",), evolves_from="Bidoof"), 4),
        )
        line = analyze_evolution(deck).lines[0]
        assert line.bottleneck == "basic"
        assert line.completeness == 100.0
        assert line.consistency < 100.0

    def test_basics_only(self) -> None:
        """A deck of Basic Pokemon has no lines and a perfect score."""
        analysis = analyze_evolution(make_deck((pokemon("Pikachu"), 4)))
        assert analysis.lines == []
        assert analysis.overall_score == 100.0

    def test_stage2_without_candy_recommends_it(self) -> None:
        deck = make_deck(
            (pokemon("Ralts", hp=70), 4),
            (pokemon("Kirlia", subtypes=("Stage 1",), evolves_from="Ralts"), 3),
            (pokemon("Gardevoir ex", subtypes=("Stage 2", "ex"), evolves_from="Kirlia"), 2),
        )
        assert "Add Rare Candy to support Stage 2 lines" in analyze_evolution(deck).recommendations
