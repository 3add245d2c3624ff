"""Tests for recommendations and cut suggestions."""

from __future__ import annotations

from factories import energy, make_deck, missing_basic_deck, no_draw_deck, pokemon, short_deck, trainer

from ptcg_core.analyzer import analyze
from ptcg_core.classifier import classify_cards
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import (
    DeckWarning,
    EvolutionAnalysis,
    MetaAnalysis,
    Recommendation,
    SynergyAnalysis,
)
from ptcg_core.evolution import analyze_evolution
from ptcg_core.recommendations import generate_recommendations, size_adjustment, suggest_cuts
from ptcg_core.synergy import analyze_synergy


def make_warning(id: str, severity: str, title: str) -> DeckWarning:
    return DeckWarning.model_validate(
        {
            "id": id,
            "severity": severity,
            "category": "consistency",
            "title": title,
            "description": title,
            "suggestions": ["Fix it"],
        }
    )


def recommend_for_warnings(deck: Deck, warnings: list[DeckWarning]) -> list[Recommendation]:
    return generate_recommendations(deck, warnings, EvolutionAnalysis(), SynergyAnalysis(), MetaAnalysis())


class TestSizeAdjustment:
    """Tests for the deck-size recommendation."""

    def test_full_deck(self) -> None:
        assert size_adjustment(no_draw_deck()) is None

    def test_short_deck(self) -> None:
        adjustment = size_adjustment(short_deck())
        assert adjustment is not None
        assert adjustment.type == "adjust"
        assert adjustment.priority == "essential"
        assert adjustment.card == "Deck size"
        assert adjustment.quantity == 2
        assert adjustment.reasoning == ["Add 2 more cards to reach 60"]

    def test_long_deck(self) -> None:
        deck = make_deck((pokemon("Pikachu"), 4), (energy(), 60))
        adjustment = size_adjustment(deck)
        assert adjustment is not None
        assert adjustment.quantity == 4
        assert adjustment.reasoning == ["Remove 4 cards to reach 60"]

    def test_size_fix_comes_first(self) -> None:
        recommendations = analyze(short_deck()).recommendations
        assert recommendations[0].card == "Deck size"
        assert recommendations[0].quantity == 2


class TestGenerateRecommendations:
    """Tests for generate_recommendations."""

    def test_missing_basic_is_essential(self) -> None:
        deck = missing_basic_deck()
        recommendations = generate_recommendations(
            deck, [], analyze_evolution(deck), SynergyAnalysis(), MetaAnalysis()
        )
        pikachu = [r for r in recommendations if r.card == "Pikachu"]
        assert len(pikachu) == 1
        assert pikachu[0].type == "add"
        assert pikachu[0].priority == "essential"
        assert pikachu[0].quantity == 3
        assert pikachu[0].synergies == ["Raichu"]

    def test_merges_by_card(self) -> None:
        """Two warnings asking for the same card collapse into one recommendation."""
        deck = missing_basic_deck()
        warnings = [
            make_warning("consistency-mulligan", "medium", "High mulligan rate"),
            make_warning("consistency-low-basics", "high", "Too few Basic Pokemon"),
        ]
        recommendations = recommend_for_warnings(deck, warnings)
        quick_ball = [r for r in recommendations if r.card == "Quick Ball"]
        assert len(quick_ball) == 1
        assert quick_ball[0].priority == "high"
        assert quick_ball[0].quantity == 4
        assert "High mulligan rate" in quick_ball[0].reasoning
        assert "Too few Basic Pokemon" in quick_ball[0].reasoning

    def test_respects_copy_limit(self) -> None:
        """Cards already at four copies are not suggested again."""
        deck = no_draw_deck()
        warnings = [make_warning("consistency-mulligan", "medium", "High mulligan rate")]
        recommendations = recommend_for_warnings(deck, warnings)
        assert all(r.card != "Quick Ball" for r in recommendations)

    def test_speed_warning_suggests_typed_acceleration(self) -> None:
        deck = missing_basic_deck()
        warnings = [make_warning("speed-slow", "high", "Slow setup")]
        recommendations = recommend_for_warnings(deck, warnings)
        assert [r.card for r in recommendations if r.card != "Deck size"] == ["Elesa's Sparkle"]

    def test_ordered_by_priority(self) -> None:
        deck = missing_basic_deck()
        warnings = [
            make_warning("power-no-gust", "high", "No gust effects"),
            make_warning("consistency-draw-support", "medium", "Light draw support"),
        ]
        meta = MetaAnalysis(tech_recommendations=["Lost Vacuum"])
        recommendations = generate_recommendations(deck, warnings, analyze_evolution(deck), SynergyAnalysis(), meta)
        order = {"essential": 0, "high": 1, "medium": 2, "low": 3}
        ranks = [order[r.priority] for r in recommendations]
        assert ranks == sorted(ranks)
        assert recommendations[-1].card == "Lost Vacuum"

    def test_anti_synergy_becomes_replace(self) -> None:
        deck = make_deck(
            (pokemon("Zapdos ex", hp=200, subtypes=("Basic", "ex"), attacks=((3, 180),), ability="Draw a card."), 3),
            (trainer("Path to the Peak", "Stadium"), 2),
        )
        classifications = classify_cards(deck.cards)
        evolution = analyze_evolution(deck)
        synergy = analyze_synergy(deck, classifications, evolution)
        recommendations = generate_recommendations(deck, [], evolution, synergy, MetaAnalysis())
        replace = [r for r in recommendations if r.type == "replace"]
        assert len(replace) == 1
        assert replace[0].card == "Zapdos ex"
        assert replace[0].target_card == "Path to the Peak"


class TestSuggestCuts:
    """Tests for suggest_cuts."""

    def test_no_cuts_when_room(self) -> None:
        deck = short_deck()
        additions = [Recommendation(type="add", priority="high", card="Iono", quantity=2)]
        assert suggest_cuts(deck, classify_cards(deck.cards), additions, []) == []

    def test_cuts_make_room(self) -> None:
        deck = no_draw_deck()
        additions = [Recommendation(type="add", priority="high", card="Professor's Research", quantity=4)]
        cuts = suggest_cuts(deck, classify_cards(deck.cards), additions, ["Boss's Orders"])
        assert sum(cut.quantity for cut in cuts) == 4
        assert all(cut.card not in ("Professor's Research", "Boss's Orders") for cut in cuts)
        qualities = [cut.quality for cut in cuts]
        assert qualities == sorted(qualities)

    def test_small_basic_counts_are_protected(self) -> None:
        deck = make_deck(
            (pokemon("Pikachu", hp=40, attacks=((1, 10),)), 4),
            (trainer("Odd Item"), 4),
            (energy(), 52),
        )
        additions = [Recommendation(type="add", priority="high", card="Iono", quantity=4)]
        cuts = suggest_cuts(deck, classify_cards(deck.cards), additions, [])
        assert all(cut.card != "Pikachu" for cut in cuts)
        assert sum(cut.quantity for cut in cuts) == 4

    def test_adjust_recommendations_do_not_need_room(self) -> None:
        deck = no_draw_deck()
        adjust = [Recommendation(type="adjust", priority="essential", card="Deck size", quantity=2)]
        assert suggest_cuts(deck, classify_cards(deck.cards), adjust, []) == []
