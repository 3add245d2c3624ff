"""Draw probability math.

All functions are pure and return values clamped to ``[0, 1]``. Binomial
coefficients are evaluated in log space so populations of several hundred
cards never overflow, and every degenerate population (empty deck, no
copies, more draws than cards) has an explicit answer instead of NaN.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from pydantic import BaseModel

from ptcg_core.config import get_settings


def _clamp(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


def log_binomial(n: int, k: int) -> float:
    """Natural log of C(n, k); ``-inf`` when the coefficient is zero."""
    if k < 0 or k > n:
        return float("-inf")
    if k == 0 or k == n:
        return 0.0
    k = min(k, n - k)
    return sum(math.log(n - i) - math.log(i + 1) for i in range(k))


def hypergeometric_probability(k: int, population: int, successes: int, draws: int) -> float:
    """Probability of exactly ``k`` successes in ``draws`` cards without replacement.

    Args:
        k: Successes wanted.
        population: Cards in the deck (N).
        successes: Success cards in the deck (K).
        draws: Cards drawn (n). Clamped to the population.
    """
    if population <= 0:
        return 1.0 if k == 0 and draws <= 0 else 0.0
    successes = min(max(successes, 0), population)
    draws = min(max(draws, 0), population)
    if k < 0 or k > successes or k > draws or draws - k > population - successes:
        return 0.0

    log_p = (
        log_binomial(successes, k)
        + log_binomial(population - successes, draws - k)
        - log_binomial(population, draws)
    )
    return _clamp(math.exp(log_p))


def probability_at_least_one(population: int, successes: int, draws: int) -> float:
    """P(at least one success) = 1 - P(none)."""
    return _clamp(1.0 - hypergeometric_probability(0, population, successes, draws))


def probability_at_least(minimum: int, population: int, successes: int, draws: int) -> float:
    """Upper tail: P(at least ``minimum`` successes)."""
    if minimum <= 0:
        return 1.0
    upper = min(successes, draws)
    total = sum(
        hypergeometric_probability(k, population, successes, draws) for k in range(minimum, upper + 1)
    )
    return _clamp(total)


def draw_probability(
    copies: int,
    exact: int,
    deck_size: int | None = None,
    hand_size: int | None = None,
) -> float:
    """Probability of opening exactly ``exact`` copies of a card."""
    settings = get_settings()
    deck_size = settings.deck_size if deck_size is None else deck_size
    hand_size = settings.hand_size if hand_size is None else hand_size
    return hypergeometric_probability(exact, deck_size, copies, hand_size)


def draw_probability_at_least(
    copies: int,
    minimum: int,
    deck_size: int | None = None,
    hand_size: int | None = None,
) -> float:
    """Probability of opening at least ``minimum`` copies of a card."""
    settings = get_settings()
    deck_size = settings.deck_size if deck_size is None else deck_size
    hand_size = settings.hand_size if hand_size is None else hand_size
    return probability_at_least(minimum, deck_size, copies, hand_size)


def mulligan_probability(
    basics: int,
    deck_size: int | None = None,
    hand_size: int | None = None,
) -> float:
    """Probability the opening hand holds no Basic Pokemon.

    Non-increasing in ``basics``: 1 with no basics, 0 when every card is one.
    """
    settings = get_settings()
    deck_size = settings.deck_size if deck_size is None else deck_size
    hand_size = settings.hand_size if hand_size is None else hand_size
    if basics <= 0:
        return 1.0
    if basics >= deck_size:
        return 0.0
    return hypergeometric_probability(0, deck_size, basics, hand_size)


def prize_probability(copies: int, deck_size: int | None = None, prizes: int | None = None) -> float:
    """Probability that every copy of a card ends up in the prize cards."""
    settings = get_settings()
    deck_size = settings.deck_size if deck_size is None else deck_size
    prizes = settings.prize_count if prizes is None else prizes
    if copies <= 0:
        return 0.0
    return hypergeometric_probability(copies, deck_size, copies, prizes)


def prize_probability_at_least_one(
    copies: int,
    deck_size: int | None = None,
    prizes: int | None = None,
) -> float:
    """Probability that at least one copy of a card is prized."""
    settings = get_settings()
    deck_size = settings.deck_size if deck_size is None else deck_size
    prizes = settings.prize_count if prizes is None else prizes
    if copies <= 0:
        return 0.0
    return probability_at_least_one(deck_size, copies, prizes)


def dead_draw_probability(
    draw_supporters: int,
    deck_size: int | None = None,
    cards_seen: int | None = None,
) -> float:
    """Probability of seeing no draw Supporter in the first cards of the game."""
    settings = get_settings()
    deck_size = settings.deck_size if deck_size is None else deck_size
    cards_seen = settings.dead_draw_cards_seen if cards_seen is None else cards_seen
    if draw_supporters <= 0:
        return 1.0
    return hypergeometric_probability(0, deck_size, draw_supporters, cards_seen)


def setup_probability(requirements: Iterable[tuple[int, int, int, int]]) -> float:
    """Joint probability of several independent "at least" requirements.

    Each requirement is ``(minimum, population, successes, draws)``. The
    requirements are treated as independent, which overstates the odds
    slightly when they compete for the same draws.
    """
    result = 1.0
    for minimum, population, successes, draws in requirements:
        result *= probability_at_least(minimum, population, successes, draws)
    return _clamp(result)


class EvolutionOdds(BaseModel):
    """Turn-by-turn odds of getting an evolution line onto the board."""

    turn_two_stage1: float
    turn_three_stage2: float
    bottleneck: str
    recommendation: str


def evolution_line_odds(
    basics: int,
    stage1: int,
    stage2: int = 0,
    deck_size: int | None = None,
) -> EvolutionOdds:
    """Odds of a Stage 1 by turn two and a Stage 2 by turn three.

    Uses the fixed cards-seen-by-turn heuristics from settings rather than
    simulating draws and search.
    """
    settings = get_settings()
    deck_size = settings.deck_size if deck_size is None else deck_size

    basic_odds = probability_at_least_one(deck_size, basics, settings.cards_seen_turn_one)
    stage1_odds = probability_at_least_one(deck_size, stage1, settings.cards_seen_turn_two)
    stage2_odds = probability_at_least_one(deck_size, stage2, settings.cards_seen_turn_three)

    turn_two = _clamp(basic_odds * stage1_odds)
    turn_three = _clamp(turn_two * stage2_odds) if stage2 > 0 else 0.0

    if basics <= 0:
        bottleneck = "basic"
    elif stage2 > 0 and stage1 < stage2:
        bottleneck = "stage1"
    elif basics < stage1:
        bottleneck = "basic"
    else:
        bottleneck = "none"

    if bottleneck == "basic":
        recommendation = f"Run at least {max(stage1, 3)} copies of the Basic"
    elif bottleneck == "stage1":
        recommendation = f"Run at least {stage2} copies of the Stage 1"
    elif turn_two < 0.6:
        recommendation = "Add evolution search such as Evolution Incense or Rare Candy"
    else:
        recommendation = "Evolution line is well built"

    return EvolutionOdds(
        turn_two_stage1=turn_two,
        turn_three_stage2=turn_three,
        bottleneck=bottleneck,
        recommendation=recommendation,
    )
