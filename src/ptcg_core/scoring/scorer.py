"""Combine scoring factors into category and headline scores."""

from __future__ import annotations

import logging

from ..data.models.responses import (
    CategoryScores,
    DeckScores,
    PerformanceSummary,
    PrizeEconomy,
    ScoreBreakdown,
    ScoringFactor,
)
from ..exceptions import ComputationError
from .factors import ScoringContext, compute_factors
from .weights import select_weight_profile

logger = logging.getLogger(__name__)

STRENGTH_THRESHOLD = 70
WEAKNESS_THRESHOLD = 60
MAX_HIGHLIGHTS = 3

NO_STRENGTHS = "No standout strengths identified"
NO_WEAKNESSES = "No significant weaknesses identified"

MILL_CARDS = ("durant", "mill", "bunnelby")


def _clamp(value: float) -> int:
    return max(0, min(100, round(value)))


def category_score(factors: list[ScoringFactor], category: str) -> float:
    """Weighted mean of the factors in one category."""
    selected = [f for f in factors if f.category == category]
    total_weight = sum(f.weight for f in selected)
    if total_weight == 0:
        return 0.0
    return sum(f.raw_score * f.weight for f in selected) / total_weight


def _highlight(factor: ScoringFactor) -> str:
    detail = factor.details[0] if factor.details else f"{factor.raw_score:.0f}/100"
    return f"{factor.name}: {detail}"


def _strengths(factors: list[ScoringFactor]) -> list[str]:
    ranked = sorted(
        (f for f in factors if f.raw_score >= STRENGTH_THRESHOLD),
        key=lambda f: (-f.raw_score, f.name),
    )
    return [_highlight(f) for f in ranked[:MAX_HIGHLIGHTS]] or [NO_STRENGTHS]


def _weaknesses(factors: list[ScoringFactor]) -> list[str]:
    ranked = sorted(
        (f for f in factors if f.raw_score < WEAKNESS_THRESHOLD),
        key=lambda f: (f.raw_score, f.name),
    )
    return [_highlight(f) for f in ranked[:MAX_HIGHLIGHTS]] or [NO_WEAKNESSES]


def score_breakdown(ctx: ScoringContext) -> ScoreBreakdown:
    """Score every factor, roll them up per category and weight the categories."""
    factors = compute_factors(ctx)
    categories = CategoryScores(
        consistency=round(category_score(factors, "consistency"), 2),
        power=round(category_score(factors, "power"), 2),
        speed=round(category_score(factors, "speed"), 2),
        versatility=round(category_score(factors, "versatility"), 2),
        meta=round(category_score(factors, "meta"), 2),
    )
    profile = select_weight_profile(categories)
    overall = max(0.0, min(100.0, profile.apply(categories)))
    confidence = sum(f.confidence for f in factors) / len(factors) if factors else 0.0
    logger.debug("Score: %.1f with %s weights", overall, profile.name)
    return ScoreBreakdown(
        overall=round(overall, 2),
        categories=categories,
        weights=profile.as_scores(),
        profile=profile.name,
        factors=factors,
        strengths=_strengths(factors),
        weaknesses=_weaknesses(factors),
        confidence=round(confidence, 3),
    )


def _difficulty(ctx: ScoringContext) -> int:
    score = 50
    edges = len(ctx.synergy.edges)
    if edges > 20:
        score += 10
    if edges > 30:
        score += 10
    evolutions = ctx.deck.count(lambda c: c.is_pokemon and c.stage > 0)
    score += min(20, evolutions * 2)
    if ctx.speed.classification in ("slow", "glacial"):
        score += 10
    return _clamp(score)


def _core_strategy(ctx: ScoringContext, prizes: PrizeEconomy) -> str:
    if prizes.strategy == "single-prize":
        return "Force favorable prize trades with single-prize attackers"
    if ctx.speed.classification in ("turbo", "fast"):
        return "Race to victory with aggressive early attacks"
    if prizes.average_prize_value >= 2:
        return "Overpower opponents with high-impact multi-prize Pokemon"
    return "Build consistent board state and adapt to matchup"


def _win_conditions(ctx: ScoringContext, prizes: PrizeEconomy) -> list[str]:
    conditions: list[str] = []
    attacks = {a.name.lower() for c in ctx.deck.cards if c.is_pokemon for a in c.attacks}
    if "star requiem" in attacks:
        conditions.append("Star Requiem for instant knockouts")
    if any(c.is_pokemon and c.max_damage > 0 for c in ctx.deck.cards):
        if prizes.strategy == "single-prize":
            conditions.append("Win 2-for-1 prize trades throughout the game")
        else:
            conditions.append("Take 6 prizes quickly with powerful attackers")
    if any(ctx.deck.has_card(name) for name in MILL_CARDS):
        conditions.append("Deck out the opponent")
    return conditions or ["Take prizes with the strongest available attacker"]


def score_deck(ctx: ScoringContext, prizes: PrizeEconomy) -> DeckScores:
    """Headline scores for the deck.

    Raises:
        ComputationError: If the deck has no cards to score.
    """
    if ctx.deck.total_cards == 0:
        raise ComputationError("scoring", "cannot score an empty deck")
    breakdown = score_breakdown(ctx)
    categories = breakdown.categories
    return DeckScores(
        overall=_clamp(breakdown.overall),
        consistency=_clamp(categories.consistency),
        power=_clamp(categories.power),
        speed=_clamp(categories.speed),
        versatility=_clamp(categories.versatility),
        meta_relevance=_clamp(categories.meta),
        innovation=_clamp(ctx.synergy.overall_score),
        difficulty=_difficulty(ctx),
        confidence=breakdown.confidence,
        core_strategy=_core_strategy(ctx, prizes),
        win_conditions=_win_conditions(ctx, prizes),
        breakdown=breakdown,
    )


def performance_summary(ctx: ScoringContext, scores: DeckScores) -> PerformanceSummary:
    """Tournament outlook derived from the headline scores."""
    rule_box_copies = ctx.deck.count(lambda c: c.is_pokemon and c.has_rule_box)
    rotating = len(ctx.meta.rotation.rotating_cards)
    return PerformanceSummary(
        tournament_performance=scores.overall,
        consistency_rating=scores.consistency,
        power_level=scores.power,
        meta_viability=scores.meta_relevance,
        skill_ceiling=scores.difficulty,
        budget_efficiency=_clamp(100 - rule_box_copies * 4),
        future_proofing=_clamp(100 - rotating * 10),
        learning_curve=_clamp(100 - scores.difficulty),
    )
