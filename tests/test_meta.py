"""Tests for archetype identification, matchups and meta evaluation."""

from __future__ import annotations

import pytest
from factories import charizard_deck, energy, fast_deck, make_deck, no_draw_deck, pokemon, trainer

from ptcg_core.classifier import classify_cards
from ptcg_core.data.meta_snapshot import MetaArchetype, MetaSnapshot, get_meta_snapshot
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import ArchetypeAnalysis, SpeedAnalysis
from ptcg_core.meta import (
    classify_archetype,
    evaluate_meta,
    favorability,
    key_card_match,
    meta_tier,
    meta_weaknesses,
    predict_matchups,
    rotation_impact,
    speed_rating,
    type_matchup,
)


def make_archetype(name: str = "Test Deck", types: tuple[str, ...] = ("Fire",), **extra: object) -> MetaArchetype:
    values: dict[str, object] = {
        "name": name,
        "tier": "tier2",
        "style": "aggro",
        "popularity": 10.0,
        "key_cards": (),
        "primary_types": types,
    }
    values.update(extra)
    return MetaArchetype.model_validate(values)


def archetype_for(deck: Deck) -> ArchetypeAnalysis:
    return classify_archetype(deck, classify_cards(deck.cards), get_meta_snapshot())


# =============================================================================
# Archetype
# =============================================================================


class TestArchetype:
    """Tests for classify_archetype."""

    def test_known_archetype(self) -> None:
        archetype = archetype_for(charizard_deck())
        assert archetype.name == "Charizard ex"
        assert archetype.matched
        assert archetype.tier == "tier1"
        assert archetype.style == "midrange"
        assert archetype.confidence == 100.0
        assert archetype.match_percentage == 100.0

    def test_unmatched_deck_is_rogue(self) -> None:
        archetype = archetype_for(no_draw_deck())
        assert not archetype.matched
        assert archetype.name.startswith("Rogue ")
        assert archetype.tier == "rogue"
        assert 0 <= archetype.confidence <= 100

    def test_style_scores_cover_every_style(self) -> None:
        archetype = archetype_for(fast_deck())
        assert set(archetype.style_scores) == {
            "aggro",
            "control",
            "combo",
            "midrange",
            "mill",
            "stall",
            "toolbox",
            "turbo",
            "spread",
        }
        assert archetype.characteristics
        assert archetype.playstyle
        assert archetype.secondary_style != archetype.style

    def test_key_card_match_is_case_insensitive(self) -> None:
        deck = make_deck((pokemon("charmander"), 4), (trainer("RARE CANDY"), 4))
        archetype = make_archetype(key_cards=("Charmander", "Rare Candy", "Charizard ex", "Pidgeot ex"))
        assert key_card_match(deck, archetype) == pytest.approx(0.5)

    def test_below_threshold_is_not_matched(self) -> None:
        """Half of the key cards is not enough to claim the archetype."""
        deck = make_deck(
            (pokemon("Charmander", types=("Fire",)), 4),
            (trainer("Rare Candy"), 4),
            (energy("Fire Energy"), 10),
        )
        assert not archetype_for(deck).matched


# =============================================================================
# Matchups
# =============================================================================


class TestFavorability:
    """Tests for win-rate labels."""

    @pytest.mark.parametrize(
        ("win_rate", "label"),
        [
            (80, "heavily favored"),
            (65, "heavily favored"),
            (55, "favored"),
            (50, "even"),
            (45, "even"),
            (35, "unfavored"),
            (34.9, "heavily unfavored"),
            (20, "heavily unfavored"),
        ],
    )
    def test_labels(self, win_rate: float, label: str) -> None:
        assert favorability(win_rate) == label


class TestTypeMatchup:
    """Tests for type advantage points."""

    def test_hitting_weakness(self) -> None:
        assert type_matchup({"Water"}, make_archetype(types=("Fire",))) == 20

    def test_being_hit(self) -> None:
        assert type_matchup({"Fire"}, make_archetype(types=("Water",))) == -20

    def test_both_directions_cancel(self) -> None:
        assert type_matchup({"Grass"}, make_archetype(types=("Water", "Fire"))) == 0

    def test_neutral(self) -> None:
        assert type_matchup({"Dragon"}, make_archetype(types=("Metal",))) == 0


class TestPredictMatchups:
    """Tests for predict_matchups."""

    def test_one_prediction_per_archetype(self) -> None:
        snapshot = get_meta_snapshot()
        deck = charizard_deck()
        matchups = predict_matchups(deck, archetype_for(deck), SpeedAnalysis(full_setup_turn=2.5), snapshot)
        assert sorted(m.opponent for m in matchups) == sorted(a.name for a in snapshot.archetypes)

    def test_win_rates_bounded_and_sorted(self) -> None:
        for deck in (no_draw_deck(), fast_deck(), charizard_deck()):
            speed = SpeedAnalysis(full_setup_turn=1.0)
            matchups = predict_matchups(deck, archetype_for(deck), speed, get_meta_snapshot())
            rates = [m.win_rate for m in matchups]
            assert all(20 <= rate <= 80 for rate in rates)
            assert rates == sorted(rates, reverse=True)
            for matchup in matchups:
                assert matchup.favorability == favorability(matchup.win_rate)
                assert len(matchup.mulligan_priority) <= 3

    def test_extreme_adjustments_are_clamped(self) -> None:
        """Many stacked bonuses still stop at 80%."""
        opponent = make_archetype(types=("Fire",), avg_setup_turn=3.0, avg_prizes_per_turn=2.0, style="combo")
        snapshot = MetaSnapshot(version="test", updated="", archetypes=(opponent,))
        deck = make_deck((pokemon("Squirtle", types=("Water",), attacks=((1, 60),)), 4), (energy("Water Energy"), 8))
        archetype = archetype_for(deck)
        matchups = predict_matchups(deck, archetype, SpeedAnalysis(full_setup_turn=1.0), snapshot)
        assert matchups[0].win_rate == 80.0
        assert matchups[0].type_advantage == "advantage"
        assert matchups[0].speed_comparison == "faster"

    def test_empty_snapshot(self) -> None:
        snapshot = MetaSnapshot(version="empty", updated="")
        deck = fast_deck()
        assert predict_matchups(deck, archetype_for(deck), SpeedAnalysis(), snapshot) == []


# =============================================================================
# Meta evaluation
# =============================================================================


class TestMetaEvaluation:
    """Tests for the meta evaluator helpers."""

    @pytest.mark.parametrize(
        ("score", "tier"),
        [(100, "tier1"), (80, "tier1"), (79, "tier2"), (65, "tier2"), (50, "tier3"), (49, "rogue")],
    )
    def test_meta_tier(self, score: int, tier: str) -> None:
        assert meta_tier(score) == tier

    def test_speed_rating_fast(self) -> None:
        deck = fast_deck()
        assert speed_rating(deck, classify_cards(deck.cards)) == "fast"

    def test_speed_rating_too_slow(self) -> None:
        deck = make_deck((pokemon("Zapdos", attacks=((3, 120),)), 4), (energy(), 10))
        assert speed_rating(deck, classify_cards(deck.cards)) == "too slow"

    def test_speed_rating_competitive(self) -> None:
        deck = make_deck((pokemon("Electabuzz", attacks=((2, 60),)), 4), (energy(), 10))
        assert speed_rating(deck, classify_cards(deck.cards)) == "competitive"

    def test_acceleration_rates_fast(self) -> None:
        deck = make_deck(
            (pokemon("Electabuzz", attacks=((2, 60),)), 4),
            (trainer("Elesa's Sparkle", "Supporter"), 4),
            (energy(), 10),
        )
        assert speed_rating(deck, classify_cards(deck.cards)) == "fast"

    def test_key_cards_match_partial_names(self) -> None:
        """A key card listed by its base name counts every printing that contains it."""
        snapshot = MetaSnapshot(version="test", updated="", key_trainers=("Quick Ball",), key_pokemon=("Giratina",))
        deck = make_deck(
            (pokemon("Giratina VSTAR", hp=280, subtypes=("Basic", "VSTAR"), attacks=((3, 280),)), 3),
            (trainer("Quick Ball"), 4),
            (energy(), 10),
        )
        classifications = classify_cards(deck.cards)
        meta = evaluate_meta(deck, classifications, ArchetypeAnalysis(), [], snapshot)
        assert meta.meta_pokemon == 1
        assert meta.meta_trainers == 1

    def test_rotation_impact(self) -> None:
        snapshot = get_meta_snapshot()
        old = pokemon("Old Pikachu", release_date="2020/01/01")
        new = pokemon("New Pikachu", release_date="2024/03/22")
        minor = rotation_impact(make_deck((old, 4), (new, 4)), snapshot)
        assert minor.rotating_cards == ["Old Pikachu"]
        assert minor.impact == "minor"
        old_ball = trainer("Old Ball", releaseDate="2019-05-01")
        assert rotation_impact(make_deck((old, 4), (old_ball, 2)), snapshot).impact == "major"
        assert rotation_impact(make_deck((new, 4)), snapshot).impact == "none"

    def test_rotation_without_cutoff(self) -> None:
        snapshot = MetaSnapshot(version="test", updated="")
        old = pokemon("Old Pikachu", release_date="2020/01/01")
        assert rotation_impact(make_deck((old, 4)), snapshot).rotating_cards == []

    def test_meta_weaknesses(self) -> None:
        deck = make_deck(
            (pokemon("Pichu", hp=40, ability="Draw a card."), 10),
            (energy(), 10),
        )
        weaknesses = meta_weaknesses(deck)
        assert "Path to the Peak vulnerability" in weaknesses
        assert "Low HP Pokemon" in weaknesses

    def test_matched_deck_keeps_archetype_tier(self) -> None:
        snapshot = get_meta_snapshot()
        deck = charizard_deck()
        classifications = classify_cards(deck.cards)
        archetype = classify_archetype(deck, classifications, snapshot)
        matchups = predict_matchups(deck, archetype, SpeedAnalysis(full_setup_turn=2.0), snapshot)
        meta = evaluate_meta(deck, classifications, archetype, matchups, snapshot)
        assert meta.tier == "tier1"
        assert meta.snapshot_version == snapshot.version
        assert meta.format_evaluation.is_legal
        assert 0 <= meta.meta_score <= 100
        assert len(meta.popular_matchups) == 5
        assert len(meta.tech_recommendations) <= 5

    def test_banned_card_fails_format(self) -> None:
        snapshot = get_meta_snapshot()
        banned = snapshot.banned_in("standard")[0]
        deck = make_deck((pokemon("Pikachu"), 4), (trainer(banned), 1))
        classifications = classify_cards(deck.cards)
        archetype = classify_archetype(deck, classifications, snapshot)
        meta = evaluate_meta(deck, classifications, archetype, [], snapshot)
        assert meta.format_evaluation.illegal_cards == [banned]
        assert not meta.format_evaluation.is_legal
