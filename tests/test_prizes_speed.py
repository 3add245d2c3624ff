"""Tests for the prize-trade economy and speed rating."""

from __future__ import annotations

import pytest
from factories import charizard_deck, energy, fast_deck, make_deck, no_draw_deck, pokemon, trainer

from ptcg_core.classifier import classify_cards
from ptcg_core.consistency import analyze_consistency
from ptcg_core.data.meta_snapshot import get_meta_snapshot
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import SpeedAnalysis
from ptcg_core.evolution import analyze_evolution
from ptcg_core.prizes import analyze_prize_economy, evaluate_trade
from ptcg_core.speed import analyze_speed, attack_ready_turn, classify_speed


def speed_for(deck: Deck) -> SpeedAnalysis:
    classifications = classify_cards(deck.cards)
    consistency = analyze_consistency(deck, classifications, analyze_evolution(deck))
    return analyze_speed(deck, classifications, consistency, get_meta_snapshot())


# =============================================================================
# Prize economy
# =============================================================================


class TestEvaluateTrade:
    """Tests for trade verdicts."""

    @pytest.mark.parametrize(
        ("ratio", "turns", "verdict"),
        [
            (3.0, 1, "excellent"),
            (2.0, 1, "excellent"),
            (1.5, 1, "favorable"),
            (1.0, 1, "even"),
            (1.0, 2, "unfavorable"),
            (0.5, 2, "terrible"),
        ],
    )
    def test_verdicts(self, ratio: float, turns: int, verdict: str) -> None:
        assert evaluate_trade(ratio, turns) == verdict


class TestPrizeEconomy:
    """Tests for analyze_prize_economy."""

    def test_no_pokemon(self) -> None:
        economy = analyze_prize_economy(make_deck((trainer("Quick Ball"), 4), (energy(), 10)))
        assert economy.efficiency == 0
        assert economy.recommendations == ["Add Pokemon to the deck"]

    def test_single_prize_deck(self) -> None:
        economy = analyze_prize_economy(fast_deck())
        assert economy.strategy == "single-prize"
        assert economy.average_prize_value == 1.0
        assert "Keep the single-prize plan and force 2-for-1 or 3-for-1 trades" in economy.recommendations

    def test_mixed_deck(self) -> None:
        economy = analyze_prize_economy(charizard_deck())
        assert economy.strategy == "mixed"
        assert economy.prize_liability == 6
        assert economy.best_traders[0].name == "Charizard ex"
        assert economy.best_traders[0].damage_per_prize == 90.0

    def test_fragile_multi_prize_liability(self) -> None:
        deck = make_deck(
            (pokemon("Pikachu V", hp=190, subtypes=("Basic", "V"), attacks=((2, 60),)), 3),
            (energy(), 10),
        )
        economy = analyze_prize_economy(deck)
        assert economy.strategy == "multi-prize"
        assert [(item.name, item.reason) for item in economy.worst_liabilities] == [
            ("Pikachu V", "Extremely fragile for its prize value")
        ]

    def test_scenarios_sorted_and_bounded(self) -> None:
        economy = analyze_prize_economy(no_draw_deck())
        ratios = [scenario.trade_ratio for scenario in economy.scenarios]
        assert ratios == sorted(ratios, reverse=True)
        assert len(economy.scenarios) <= 10
        assert all(scenario.turns_to_knock_out <= 3 for scenario in economy.scenarios)


# =============================================================================
# Speed
# =============================================================================


class TestAttackReadyTurn:
    """Tests for attack_ready_turn."""

    def test_one_energy_basic(self) -> None:
        assert attack_ready_turn(pokemon("Pikachu", attacks=((1, 30),)), acceleration=0) == 1

    def test_energy_cost_delays(self) -> None:
        assert attack_ready_turn(pokemon("Zapdos", attacks=((3, 120),)), acceleration=0) == 3

    def test_acceleration_doubles_attachments(self) -> None:
        assert attack_ready_turn(pokemon("Zapdos", attacks=((3, 120),)), acceleration=4) == 2

    def test_stage_delay_and_rare_candy(self) -> None:
        card = pokemon("Electivire", subtypes=("Stage 2",), evolves_from="Electabuzz", attacks=((1, 90),))
        assert attack_ready_turn(card, acceleration=0) == 3
        assert attack_ready_turn(card, acceleration=0, rare_candy=True) == 2


class TestClassifySpeed:
    """Tests for the speed class thresholds."""

    @pytest.mark.parametrize(
        ("average", "label"),
        [(100, "turbo"), (85, "turbo"), (84, "fast"), (70, "fast"), (50, "medium"), (30, "slow"), (29, "glacial")],
    )
    def test_thresholds(self, average: float, label: str) -> None:
        assert classify_speed(average) == label


class TestAnalyzeSpeed:
    """Tests for analyze_speed."""

    def test_accelerated_single_prize_deck_is_fast(self) -> None:
        speed = speed_for(fast_deck())
        assert speed.first_attack_turn == 1.0
        assert speed.absolute_speed == 100
        assert speed.classification in ("fast", "turbo")
        assert speed.meta_comparison == "faster"

    def test_turn_outline(self) -> None:
        outline = speed_for(fast_deck()).turn_outline
        assert [plan.turn for plan in outline] == [1, 2, 3, 4]
        assert "First attack" in outline[0].actions

    def test_no_attackers_is_glacial(self) -> None:
        speed = speed_for(make_deck((pokemon("Pichu", attacks=((1, 0),)), 4), (energy(), 10)))
        assert speed.classification == "glacial"
        assert speed.first_attack_turn == 5.0
        assert len(speed.slower_than) == len(get_meta_snapshot().archetypes)

    def test_scores_in_range(self) -> None:
        for deck in (no_draw_deck(), charizard_deck()):
            speed = speed_for(deck)
            for value in (speed.absolute_speed, speed.relative_speed, speed.average_speed):
                assert 0 <= value <= 100
            assert 0 <= speed.recovery_speed <= 100
            assert 0 <= speed.late_game_sustainability <= 100
