"""Win-rate estimates against the snapshot archetypes.

Every matchup starts even and collects bounded adjustments; the final
rate stays within [20, 80] because none of these signals justify more
certainty than that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..data.knowledge import TYPE_WEAKNESSES
from ..data.meta_snapshot import MetaArchetype, MetaSnapshot
from ..data.models.card import Deck
from ..data.models.responses import (
    ArchetypeAnalysis,
    Favorability,
    MatchupPrediction,
    SpeedAnalysis,
)

logger = logging.getLogger(__name__)

BASE_WIN_RATE = 50.0
MIN_WIN_RATE = 20.0
MAX_WIN_RATE = 80.0

TYPE_BONUS = 20
SPEED_POINTS_PER_TURN = 10
SPEED_CAP = 20
SIGNIFICANT_SPEED_GAP = 0.5
COUNTER_CAP = 20
CYCLE_BONUS = 10
SINGLE_PRIZE_BONUS = 15
MULTI_PRIZE_PENALTY = 10
MAX_MULLIGAN_PRIORITIES = 3


def favorability(win_rate: float) -> Favorability:
    if win_rate >= 65:
        return "heavily favored"
    if win_rate >= 55:
        return "favored"
    if win_rate >= 45:
        return "even"
    if win_rate >= 35:
        return "unfavored"
    return "heavily unfavored"


@dataclass
class _Adjustments:
    total: float = 0.0
    factors: list[str] = field(default_factory=list)

    def add(self, points: float, factor: str = "") -> None:
        self.total += points
        if factor and points != 0:
            self.factors.append(factor)


def _attacking_types(deck: Deck) -> set[str]:
    types = {t for c in deck.cards if c.is_pokemon and c.max_damage > 0 for t in c.types}
    return types or deck.pokemon_types


def type_matchup(our_types: set[str], opponent: MetaArchetype) -> int:
    """+TYPE_BONUS when we hit a weakness, -TYPE_BONUS when they hit ours; both cancel out."""
    points = 0
    if any(t in TYPE_WEAKNESSES.get(defending, ()) for defending in opponent.primary_types for t in our_types):
        points += TYPE_BONUS
    if any(t in TYPE_WEAKNESSES.get(defending, ()) for defending in our_types for t in opponent.primary_types):
        points -= TYPE_BONUS
    return points


def _prize_trade(deck: Deck, opponent: MetaArchetype) -> int:
    single = deck.count(lambda c: c.is_pokemon and c.prize_value == 1)
    multi = deck.count(lambda c: c.is_pokemon and c.prize_value > 1)
    if single > multi and opponent.avg_prizes_per_turn >= 2:
        return SINGLE_PRIZE_BONUS
    if multi > single and opponent.avg_prizes_per_turn <= 1.5:
        return -MULTI_PRIZE_PENALTY
    return 0


def _strategy(win_rate: float, speed_gap: float, key_cards: list[str], type_points: int) -> str:
    plans: list[str] = []
    if win_rate >= 60:
        plans.append("Play to your advantages and close out the game quickly")
    elif win_rate <= 40:
        plans.append("Play defensively and look for opponent mistakes")
    else:
        plans.append("Focus on consistent execution of your strategy")
    if speed_gap > 0:
        plans.append("Pressure early before the opponent sets up")
    elif speed_gap < 0:
        plans.append("Survive the early game and win in the late game")
    if key_cards:
        plans.append(f"Prioritize getting {key_cards[0]} into play")
    if type_points > 0:
        plans.append("Exploit the type advantage with your attackers")
    return ". ".join(plans[:2]) + "."


def predict_matchup(
    deck: Deck,
    archetype: ArchetypeAnalysis,
    speed: SpeedAnalysis,
    opponent: MetaArchetype,
    snapshot: MetaSnapshot,
) -> MatchupPrediction:
    adjustments = _Adjustments()

    type_points = type_matchup(_attacking_types(deck), opponent)
    adjustments.add(
        type_points,
        f"Type advantage against {opponent.name}" if type_points > 0 else f"Type disadvantage against {opponent.name}",
    )

    speed_gap = opponent.avg_setup_turn - speed.full_setup_turn
    speed_points = max(-SPEED_CAP, min(SPEED_CAP, speed_gap * SPEED_POINTS_PER_TURN))
    if abs(speed_gap) >= SIGNIFICANT_SPEED_GAP:
        adjustments.add(speed_points, "Faster setup" if speed_gap > 0 else "Slower setup")
    else:
        adjustments.add(speed_points)

    key_cards: list[str] = []
    counter_points = 0
    for counter in snapshot.counter_cards:
        if opponent.name in counter.counters and deck.has_card(counter.name):
            key_cards.append(counter.name)
            counter_points += counter.bonus
    if key_cards:
        adjustments.add(min(COUNTER_CAP, counter_points), f"Counter cards: {', '.join(key_cards)}")

    if snapshot.beats(archetype.style, opponent.style):
        adjustments.add(CYCLE_BONUS, f"{archetype.style.capitalize()} is favored against {opponent.style}")
    elif snapshot.beats(opponent.style, archetype.style):
        adjustments.add(-CYCLE_BONUS, f"{opponent.style.capitalize()} is favored against {archetype.style}")

    prize_points = _prize_trade(deck, opponent)
    adjustments.add(
        prize_points,
        "Favorable prize trade with single-prize attackers"
        if prize_points > 0
        else "Unfavorable prize trade with multi-prize Pokemon",
    )

    win_rate = round(max(MIN_WIN_RATE, min(MAX_WIN_RATE, BASE_WIN_RATE + adjustments.total)), 1)

    if speed_gap > 0:
        mulligan = ["Energy acceleration cards", "Low cost attackers"]
    else:
        mulligan = ["Basic Pokemon to set up", "Draw Supporters"]
    mulligan.extend(key_cards[:2])

    if abs(speed_gap) < SIGNIFICANT_SPEED_GAP:
        comparison = "even"
    else:
        comparison = "faster" if speed_gap > 0 else "slower"

    names = deck.lower_names
    return MatchupPrediction(
        opponent=opponent.name,
        opponent_tier=opponent.tier,
        popularity=opponent.popularity,
        win_rate=win_rate,
        favorability=favorability(win_rate),
        type_advantage="advantage" if type_points > 0 else "disadvantage" if type_points < 0 else "neutral",
        speed_comparison=comparison,
        strategy=_strategy(win_rate, speed_gap, key_cards, type_points),
        key_factors=adjustments.factors,
        key_cards=key_cards,
        tech_options=[t for t in opponent.tech_options if t.lower() not in names],
        mulligan_priority=mulligan[:MAX_MULLIGAN_PRIORITIES],
    )


def predict_matchups(
    deck: Deck,
    archetype: ArchetypeAnalysis,
    speed: SpeedAnalysis,
    snapshot: MetaSnapshot,
) -> list[MatchupPrediction]:
    """Matchups against every snapshot archetype, best first."""
    predictions = [predict_matchup(deck, archetype, speed, opponent, snapshot) for opponent in snapshot.archetypes]
    predictions.sort(key=lambda m: (-m.win_rate, m.opponent))
    logger.debug("Predicted %d matchups", len(predictions))
    return predictions
