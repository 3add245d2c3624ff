"""Tests for the multi-factor scorer."""

from __future__ import annotations

import pytest
from factories import charizard_deck, fast_deck, no_draw_deck

from ptcg_core.analyzer import analyze
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.responses import (
    CategoryScores,
    ConsistencyAnalysis,
    MetaAnalysis,
    PrizeEconomy,
    ScoreBreakdown,
    ScoringFactor,
    SpeedAnalysis,
    SynergyAnalysis,
)
from ptcg_core.exceptions import ComputationError
from ptcg_core.scoring import (
    AGGRO,
    BALANCED,
    CONTROL,
    FACTORS,
    PROFILES,
    ScoringContext,
    category_score,
    score_deck,
    select_weight_profile,
)


def make_factor(name: str, category: str, raw_score: float, weight: float) -> ScoringFactor:
    return ScoringFactor.model_validate(
        {"name": name, "category": category, "raw_score": raw_score, "weight": weight, "confidence": 1.0}
    )


class TestWeightProfiles:
    """Tests for the category weight profiles."""

    @pytest.mark.parametrize("name", sorted(PROFILES))
    def test_profiles_sum_to_one(self, name: str) -> None:
        assert PROFILES[name].total == pytest.approx(1.0, abs=0.001)

    def test_aggro_for_fast_powerful_decks(self) -> None:
        categories = CategoryScores(consistency=90, power=85, speed=80, versatility=90, meta=50)
        assert select_weight_profile(categories) is AGGRO

    def test_control_for_consistent_versatile_decks(self) -> None:
        categories = CategoryScores(consistency=85, power=50, speed=50, versatility=75, meta=50)
        assert select_weight_profile(categories) is CONTROL

    def test_balanced_by_default(self) -> None:
        assert select_weight_profile(CategoryScores()) is BALANCED

    def test_default_breakdown_uses_balanced_weights(self) -> None:
        breakdown = ScoreBreakdown()
        assert breakdown.profile == BALANCED.name
        assert breakdown.weights == BALANCED.as_scores()

    def test_apply(self) -> None:
        categories = CategoryScores(consistency=100, power=100, speed=100, versatility=100, meta=100)
        assert BALANCED.apply(categories) == pytest.approx(100.0)


class TestCategoryScore:
    """Tests for category roll-up."""

    def test_empty_category_is_zero(self) -> None:
        assert category_score([], "power") == 0.0

    def test_weighted_mean(self) -> None:
        factors = [
            make_factor("A", "power", 100, 0.75),
            make_factor("B", "power", 20, 0.25),
            make_factor("C", "speed", 0, 1.0),
        ]
        assert category_score(factors, "power") == pytest.approx(80.0)
        assert category_score(factors, "speed") == 0.0


class TestScoreDeck:
    """Tests for headline scores."""

    def test_twenty_factors(self) -> None:
        assert len(FACTORS) == 20
        breakdown = analyze(charizard_deck()).scores.breakdown
        assert len(breakdown.factors) == 20
        assert len({factor.name for factor in breakdown.factors}) == 20
        for factor in breakdown.factors:
            assert 0 <= factor.raw_score <= 100
            assert 0 <= factor.confidence <= 1

    def test_scores_in_range(self) -> None:
        for deck in (no_draw_deck(), fast_deck(), charizard_deck()):
            scores = analyze(deck).scores
            for value in (
                scores.overall,
                scores.consistency,
                scores.power,
                scores.speed,
                scores.versatility,
                scores.meta_relevance,
                scores.innovation,
                scores.difficulty,
            ):
                assert 0 <= value <= 100
            assert 0 <= scores.confidence <= 1

    def test_weights_match_chosen_profile(self) -> None:
        breakdown = analyze(fast_deck()).scores.breakdown
        assert breakdown.weights == PROFILES[breakdown.profile].as_scores()
        assert breakdown.overall == pytest.approx(PROFILES[breakdown.profile].apply(breakdown.categories), abs=0.01)

    def test_highlights_never_empty(self) -> None:
        breakdown = analyze(no_draw_deck()).scores.breakdown
        assert breakdown.strengths
        assert breakdown.weaknesses

    def test_single_prize_strategy(self) -> None:
        scores = analyze(fast_deck()).scores
        assert scores.core_strategy == "Force favorable prize trades with single-prize attackers"
        assert "Win 2-for-1 prize trades throughout the game" in scores.win_conditions

    def test_empty_deck_raises(self) -> None:
        ctx = ScoringContext(
            Deck(), {}, ConsistencyAnalysis(), SynergyAnalysis(), SpeedAnalysis(), MetaAnalysis()
        )
        with pytest.raises(ComputationError) as excinfo:
            score_deck(ctx, PrizeEconomy())
        assert excinfo.value.stage == "scoring"
