"""Speed rating.

Estimates when each attacker can first attack from its evolution stage and
attack cost, then rates the deck in absolute terms and against the meta
snapshot's setup turns.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from ptcg_core.classifier import count_classified, is_acceleration, is_draw_support
from ptcg_core.config import get_settings
from ptcg_core.data.knowledge import OHKO_DAMAGE, RECOVERY_KEYWORDS, TWO_HIT_KO_DAMAGE, name_in
from ptcg_core.data.meta_snapshot import MetaSnapshot
from ptcg_core.data.models.card import CardFace, Deck
from ptcg_core.data.models.responses import (
    CardClassification,
    ConsistencyAnalysis,
    MetaComparison,
    PrizeRaceSpeed,
    SpeedAnalysis,
    SpeedClass,
    TurnPlan,
)

logger = logging.getLogger(__name__)

# Used when the deck has no damaging attacks
DEFAULT_DAMAGE = 50
# Typical HP of a knockout target when converting damage to prizes per turn
AVERAGE_TARGET_HP = 120
# Full-setup turns within this many turns of an archetype count as comparable
META_TOLERANCE = 0.5
COMPARABLE_TOLERANCE = 0.25
OUTLINE_TURNS = 4

SPEED_THRESHOLDS: tuple[tuple[int, SpeedClass], ...] = (
    (85, "turbo"),
    (70, "fast"),
    (50, "medium"),
    (30, "slow"),
)


@dataclass(frozen=True)
class _Attacker:
    card: CardFace
    quantity: int
    ready_turn: int


def attack_ready_turn(card: CardFace, acceleration: int, rare_candy: bool = False) -> int:
    """Earliest turn ``card`` can use its cheapest attack.

    One Energy is attached per turn; every four acceleration cards add one
    more attachment per turn, up to double.
    """
    stage_delay = card.stage
    if card.stage == 2 and rare_candy:
        stage_delay = 1
    cost = card.min_attack_cost or 0
    rate = 1 + min(1.0, acceleration / 4)
    energy_turn = math.ceil(cost / rate) if cost > 0 else 1
    return max(1 + stage_delay, energy_turn)


def _attackers(deck: Deck, acceleration: int, rare_candy: bool) -> list[_Attacker]:
    return [
        _Attacker(entry.card, entry.quantity, attack_ready_turn(entry.card, acceleration, rare_candy))
        for entry in deck.entries_where(lambda c: c.is_pokemon and c.max_damage > 0)
    ]


def classify_speed(average: float) -> SpeedClass:
    for threshold, label in SPEED_THRESHOLDS:
        if average >= threshold:
            return label
    return "glacial"


def _prize_race(deck: Deck, classifications: dict[str, CardClassification]) -> PrizeRaceSpeed:
    total = 0
    copies = 0
    peak = 0
    for entry in deck.entries_where(lambda c: c.is_pokemon):
        classification = classifications.get(entry.card.id)
        if classification is None or classification.role not in ("main_attacker", "support_attacker"):
            continue
        for attack in entry.card.attacks:
            if attack.damage <= 0:
                continue
            total += attack.damage * entry.quantity
            copies += entry.quantity
            peak = max(peak, attack.damage)

    average = total / copies if copies else float(DEFAULT_DAMAGE)
    prizes_per_turn = average / AVERAGE_TARGET_HP
    turns_to_win = get_settings().prize_count / prizes_per_turn if prizes_per_turn > 0 else 99.0
    return PrizeRaceSpeed(
        average_damage=round(average, 1),
        ohko_capable=peak >= OHKO_DAMAGE,
        two_hit_reliable=average >= TWO_HIT_KO_DAMAGE,
        turns_to_win=round(min(99.0, turns_to_win), 1),
        score=max(0, min(100, round(average * 2 / OHKO_DAMAGE * 100))),
    )


def _recovery_speed(deck: Deck, classifications: dict[str, CardClassification], attackers: list[_Attacker]) -> int:
    score = 50
    score += 8 * deck.count(lambda c: c.is_trainer and name_in(c.name, RECOVERY_KEYWORDS))
    bench_sitters = count_classified(deck, classifications, lambda c: c.role == "ability_support")
    score += min(20, bench_sitters * 3)
    distinct = len({a.card.name for a in attackers})
    if distinct >= 3:
        score += 15
    elif distinct >= 2:
        score += 8
    return max(0, min(100, score))


def _late_game(deck: Deck, attackers: list[_Attacker]) -> int:
    score = 50
    score += 8 * len(
        {e.card.name for e in deck.entries if e.card.is_trainer and name_in(e.card.name, RECOVERY_KEYWORDS)}
    )
    if deck.has_card("professor's research") or deck.has_card("colress's experiment"):
        score += 10
    if deck.has_card("cynthia") or deck.has_card("judge") or deck.has_card("iono"):
        score += 8
    for name in ("pal pad", "vs seeker", "trainers' mail"):
        if deck.has_card(name):
            score += 10
    if deck.total_cards == get_settings().deck_size:
        score += 5
    score += 5 * len({a.card.name for a in attackers if a.card.prize_value == 1})
    return max(0, min(100, score))


def _meta_position(full_setup: float, snapshot: MetaSnapshot) -> tuple[list[str], list[str], int, MetaComparison]:
    faster: list[str] = []
    slower: list[str] = []
    archetypes = snapshot.by_popularity
    for archetype in archetypes:
        if full_setup < archetype.avg_setup_turn - META_TOLERANCE:
            faster.append(archetype.name)
        elif full_setup > archetype.avg_setup_turn + META_TOLERANCE:
            slower.append(archetype.name)

    if archetypes:
        relative = 50 + 50 * (len(faster) - len(slower)) / len(archetypes)
    else:
        relative = 50.0
    relative += (snapshot.average_setup_turn - full_setup) * 10

    if full_setup < snapshot.average_setup_turn - COMPARABLE_TOLERANCE:
        comparison: MetaComparison = "faster"
    elif full_setup > snapshot.average_setup_turn + COMPARABLE_TOLERANCE:
        comparison = "slower"
    else:
        comparison = "comparable"
    return faster, slower, max(0, min(100, round(relative))), comparison


def _turn_outline(
    attackers: list[_Attacker],
    consistency: ConsistencyAnalysis,
    accelerated: bool,
) -> list[TurnPlan]:
    setup = consistency.setup_probabilities
    odds = {1: setup.turn_one, 2: setup.turn_two, 3: setup.turn_three}
    outline: list[TurnPlan] = []
    for turn in range(1, OUTLINE_TURNS + 1):
        ready = [a for a in attackers if a.ready_turn <= turn]
        damage = max((a.card.max_damage for a in ready), default=0)
        if turn == 1:
            actions = ["Bench Basic Pokemon", "Attach Energy"]
        elif turn == 2:
            actions = ["Evolve to Stage 1", "Search for attackers"]
        elif turn == 3:
            actions = ["Main attacker online", "Take prizes"]
        else:
            actions = ["Full setup", "Execute the win condition"]
        if ready and turn == min(a.ready_turn for a in attackers):
            actions.append("First attack")
        outline.append(
            TurnPlan(
                turn=turn,
                setup_probability=odds.get(turn, setup.turn_three),
                energy_attached=turn + turn // 2 if accelerated else turn,
                damage_output=damage,
                actions=actions,
            )
        )
    return outline


def _recommendations(classification: SpeedClass, first_attack: float, accelerated: bool) -> list[str]:
    recommendations: list[str] = []
    if classification in ("slow", "glacial"):
        recommendations.append("Deck is too slow for the current meta and needs acceleration")
        if not accelerated:
            recommendations.append("Add Energy acceleration such as Elesa's Sparkle or Dark Patch")
        if first_attack > 2:
            recommendations.append("Add single-prize attackers that can attack on turns 1-2")
        recommendations.append("Consider adding more draw Supporters")
    elif classification == "medium":
        recommendations.append("Speed is acceptable but could be improved")
        recommendations.append("Consider adding 1-2 more acceleration cards")
    else:
        recommendations.append("Excellent speed; keep the pressure on")
        recommendations.append("Make sure you have recovery options for the late game")
    return recommendations


def analyze_speed(
    deck: Deck,
    classifications: dict[str, CardClassification],
    consistency: ConsistencyAnalysis,
    snapshot: MetaSnapshot,
) -> SpeedAnalysis:
    """Rate how quickly the deck starts attacking."""
    acceleration = sum(
        entry.quantity
        for entry in deck.entries
        if entry.card.id in classifications and is_acceleration(entry.card, classifications[entry.card.id])
    )
    accelerated = acceleration > 0
    attackers = _attackers(deck, acceleration, consistency.evolution.has_rare_candy)
    prize_race = _prize_race(deck, classifications)

    if not attackers:
        logger.debug("Speed: no damaging attackers")
        return SpeedAnalysis(
            first_attack_turn=5.0,
            full_setup_turn=5.0,
            classification="glacial",
            meta_comparison="slower",
            slower_than=[a.name for a in snapshot.by_popularity],
            prize_race=prize_race,
            recommendations=_recommendations("glacial", 5.0, accelerated),
        )

    draw_support = count_classified(deck, classifications, is_draw_support)
    first_attack = float(min(a.ready_turn for a in attackers))
    copies = sum(a.quantity for a in attackers)
    full_setup = sum(a.ready_turn * a.quantity for a in attackers) / copies
    if draw_support < 4:
        full_setup += 0.5
    if consistency.mulligan_probability > 0.25:
        full_setup += 0.5
    full_setup = round(full_setup, 2)

    absolute = 100 - (first_attack - 1) * 20 - max(0.0, full_setup - 1) * 15
    if accelerated:
        absolute += 10
    absolute += min(10, draw_support * 2)
    absolute_speed = max(0, min(100, round(absolute)))

    faster, slower, relative_speed, comparison = _meta_position(full_setup, snapshot)
    average = round((absolute_speed + relative_speed) / 2)
    classification = classify_speed(average)

    logger.debug(
        "Speed: first attack %.1f, full setup %.2f, %s (%d)", first_attack, full_setup, classification, average
    )
    return SpeedAnalysis(
        first_attack_turn=first_attack,
        full_setup_turn=full_setup,
        absolute_speed=absolute_speed,
        relative_speed=relative_speed,
        average_speed=average,
        classification=classification,
        meta_comparison=comparison,
        faster_than=faster,
        slower_than=slower,
        turn_outline=_turn_outline(attackers, consistency, accelerated),
        prize_race=prize_race,
        recovery_speed=_recovery_speed(deck, classifications, attackers),
        late_game_sustainability=_late_game(deck, attackers),
        recommendations=_recommendations(classification, first_attack, accelerated),
    )
